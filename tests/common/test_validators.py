"""
Tests for input validation utilities.
"""

import warnings

import numpy as np
import pytest

from guidedAL.common.exceptions import ValidationError
from guidedAL.common.validators import (
    validate_node_ids,
    validate_label_map,
    validate_probabilities,
)


class TestValidateNodeIds:
    """Test node id validation."""

    def test_valid_ids_are_returned_as_ints(self):
        """Test numpy integers are converted and order is kept."""
        assert validate_node_ids([np.int64(2), 0], num_nodes=3) == [2, 0]

    def test_out_of_range(self):
        """Test ids outside the graph raise."""
        with pytest.raises(ValidationError, match="Node id out of range"):
            validate_node_ids([3], num_nodes=3)
        with pytest.raises(ValidationError, match="out of range"):
            validate_node_ids([-1], num_nodes=3)

    def test_non_integer(self):
        """Test strings, floats and bools are rejected."""
        for bad in ["a", 1.0, True]:
            with pytest.raises(ValidationError, match="Node ids must be integers"):
                validate_node_ids([bad], num_nodes=3)

    def test_field_name_in_message(self):
        """Test the field name is reported."""
        with pytest.raises(ValidationError, match="field 'train_set'"):
            validate_node_ids([10], num_nodes=3, field="train_set")


class TestValidateLabelMap:
    """Test label map validation."""

    def test_valid_map(self):
        """Test a valid map passes."""
        validate_label_map({0: "a", 1: "b"}, ["a", "b"])

    def test_empty_labels(self):
        """Test empty label list raises."""
        with pytest.raises(ValidationError, match="Labels list is empty"):
            validate_label_map({}, [])

    def test_duplicate_labels(self):
        """Test duplicate labels raise."""
        with pytest.raises(ValidationError, match="contains duplicates"):
            validate_label_map({}, ["a", "a"])

    def test_unknown_label(self):
        """Test values outside the label list raise."""
        with pytest.raises(ValidationError, match="Invalid labels found"):
            validate_label_map({0: "a", 1: "z"}, ["a", "b"])

    def test_imbalance_warning(self):
        """Test strong imbalance issues a warning."""
        label_map = {i: "a" for i in range(20)}
        label_map[20] = "b"
        with pytest.warns(UserWarning, match="imbalanced"):
            validate_label_map(label_map, ["a", "b"])

    def test_imbalance_check_can_be_disabled(self):
        """Test no warning when check_balance is False."""
        label_map = {i: "a" for i in range(20)}
        label_map[20] = "b"
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            validate_label_map(label_map, ["a", "b"], check_balance=False)


class TestValidateProbabilities:
    """Test probability matrix validation."""

    def test_nan_rows_allowed(self):
        """Test rows of NaN pass and the result is float64."""
        matrix = validate_probabilities([[0.5, 0.5], [np.nan, np.nan]], num_labels=2)
        assert matrix.dtype == np.float64
        assert matrix.shape == (2, 2)

    def test_wrong_dimensions(self):
        """Test one-dimensional input raises."""
        with pytest.raises(ValidationError, match="2-dimensional"):
            validate_probabilities([0.5, 0.5])

    def test_wrong_columns(self):
        """Test column count must match the labels."""
        with pytest.raises(ValidationError, match="wrong number of columns"):
            validate_probabilities([[0.2, 0.3, 0.5]], num_labels=2)

    def test_negative(self):
        """Test negative probabilities raise."""
        with pytest.raises(ValidationError, match="non-negative"):
            validate_probabilities([[-0.1, 1.1]])
