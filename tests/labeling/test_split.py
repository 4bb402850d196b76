"""
Tests for DataSplit.
"""

import logging

import networkit as nk
import numpy as np
import pytest

from guidedAL.common.exceptions import ValidationError
from guidedAL.common.id_mapper import IDMapper
from guidedAL.labeling.classification import Classification
from guidedAL.labeling.split import DataSplit


class TestDataSplit:
    """Test split construction and derived sets."""

    def setup_method(self):
        """Five node path with four labeled nodes."""
        self.graph = nk.Graph(5)
        for v in range(4):
            self.graph.addEdge(v, v + 1)
        self.truth = Classification.from_dict({0: "a", 1: "b", 2: "a", 4: "b"}, ["a", "b"], num_nodes=5)

    def test_basic_split(self):
        """Test sets and sizes."""
        split = DataSplit(self.graph, self.truth, [0], [2, 1])
        assert split.train_set == [0]
        assert split.test_set == [2, 1]
        assert split.unknown_set == [1, 2, 3, 4]
        assert split.train_set_size == 1
        assert split.test_set_size == 2
        assert split.unknown_set_size == 4
        assert split.has_truth

    def test_has_truth_false(self):
        """Test a test node without a true class."""
        split = DataSplit(self.graph, self.truth, [0], [3])
        assert not split.has_truth

    def test_empty_sets(self):
        """Test both sets empty is rejected."""
        with pytest.raises(ValidationError, match="Both train and test sets are empty"):
            DataSplit(self.graph, self.truth, [], [])

    def test_out_of_range(self):
        """Test node ids are validated."""
        with pytest.raises(ValidationError, match="out of range"):
            DataSplit(self.graph, self.truth, [0], [9])

    def test_truth_size_mismatch(self):
        """Test truth must cover the graph."""
        with pytest.raises(ValidationError, match="Truth does not cover the graph"):
            DataSplit(self.graph, Classification(["a"], 3), [0], [1])

    def test_overlap_warning(self, caplog):
        """Test overlapping sets are logged."""
        logging.getLogger("guidedAL").propagate = True
        with caplog.at_level(logging.WARNING, logger="guidedAL"):
            DataSplit(self.graph, self.truth, [0, 1], [1, 2])
        assert "appear in both the train and the test set" in caplog.text

    def test_class_distribution(self):
        """Test the distribution covers train nodes only."""
        split = DataSplit(self.graph, self.truth, [0, 1, 2], [4])
        np.testing.assert_allclose(split.get_class_distribution(), [2 / 3, 1 / 3])

    def test_from_labels_default_test_set(self):
        """Test the default test set is every other labeled node."""
        split = DataSplit.from_labels(self.graph, ["a", "b"], {0: "a", 1: "b", 4: "a"}, train_ids=[1])
        assert split.train_set == [1]
        assert split.test_set == [0, 4]

    def test_from_labels_with_mapper(self):
        """Test original ids are translated in both sets."""
        mapper = IDMapper.from_ids(["p", "q", "r", "s", "t"])
        split = DataSplit.from_labels(
            self.graph, ["a", "b"], {"p": "a", "t": "b"},
            train_ids=["p"], test_ids=["t"], id_mapper=mapper
        )
        assert split.train_set == [0]
        assert split.test_set == [4]
        assert split.truth.get_label(4) == "b"
        assert split.id_mapper is mapper
