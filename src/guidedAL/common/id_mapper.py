"""
ID mapping between caller node identifiers and networkit node indices.

networkit graphs address nodes by consecutive integers starting at 0, while
callers usually know their nodes by names. Label maps and pick results can be
translated in both directions through an IDMapper.
"""

from typing import Any, Dict, Iterable, List


class IDMapper:
    """
    Bidirectional mapping between original and internal node IDs.

    Attributes
    ----------
    original_to_internal : Dict[Any, int]
        Maps original IDs to networkit node indices
    internal_to_original : Dict[int, Any]
        Maps networkit node indices to original IDs

    Examples
    --------
    >>> mapper = IDMapper.from_ids(["alice", "bob"])
    >>> mapper.get_internal("bob")
    1
    >>> mapper.get_original(0)
    'alice'
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[Any, int] = {}
        self.internal_to_original: Dict[int, Any] = {}

    @classmethod
    def from_ids(cls, original_ids: Iterable[Any]) -> 'IDMapper':
        """
        Build a mapper assigning consecutive internal IDs in iteration order.

        Raises
        ------
        ValueError
            If an original ID occurs twice
        """
        mapper = cls()
        for internal_id, original_id in enumerate(original_ids):
            mapper.add_mapping(original_id, internal_id)
        return mapper

    def get_internal(self, original_id: Any) -> int:
        """
        Get the networkit node index for an original ID.

        Raises
        ------
        KeyError
            If original_id is not found in the mapping
        """
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Original ID '{original_id}' not found in mapping")

    def get_original(self, internal_id: int) -> Any:
        """
        Get the original ID for a networkit node index.

        Raises
        ------
        KeyError
            If internal_id is not found in the mapping
        TypeError
            If internal_id is not an integer
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        try:
            return self.internal_to_original[internal_id]
        except KeyError:
            raise KeyError(f"Internal ID {internal_id} not found in mapping")

    def get_internal_batch(self, original_ids: List[Any]) -> List[int]:
        """Translate a list of original IDs; raises KeyError on the first miss."""
        return [self.get_internal(original_id) for original_id in original_ids]

    def get_original_batch(self, internal_ids: List[int]) -> List[Any]:
        """Translate a list of node indices; raises KeyError on the first miss."""
        return [self.get_original(internal_id) for internal_id in internal_ids]

    def add_mapping(self, original_id: Any, internal_id: int) -> None:
        """
        Add a new ID mapping pair.

        Parameters
        ----------
        original_id : Any
            Original node identifier (must be hashable)
        internal_id : int
            networkit node index (must be a non-negative integer)

        Raises
        ------
        ValueError
            If either ID is already mapped, or internal_id is negative
        TypeError
            If internal_id is not an integer or original_id is not hashable
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        if internal_id < 0:
            raise ValueError(f"Internal ID must be non-negative, got {internal_id}")

        try:
            hash(original_id)
        except TypeError:
            raise TypeError(f"Original ID must be hashable, got {type(original_id)}")

        if original_id in self.original_to_internal:
            existing_internal = self.original_to_internal[original_id]
            raise ValueError(
                f"Original ID '{original_id}' already mapped to internal ID {existing_internal}"
            )

        if internal_id in self.internal_to_original:
            existing_original = self.internal_to_original[internal_id]
            raise ValueError(
                f"Internal ID {internal_id} already mapped to original ID '{existing_original}'"
            )

        self.original_to_internal[original_id] = internal_id
        self.internal_to_original[internal_id] = original_id

    def size(self) -> int:
        return len(self.original_to_internal)

    def has_original(self, original_id: Any) -> bool:
        return original_id in self.original_to_internal

    def has_internal(self, internal_id: int) -> bool:
        return internal_id in self.internal_to_original

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, item: Any) -> bool:
        return self.has_original(item)

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
