"""
Operations run over an assets catalog.

An operation is a single read-only pass over a catalog. Operations are
composable: a CompoundOperation runs its children in order and stops at the
first failure.
"""

from typing import List, Sequence


class Operation:
    """A read-only pass over an assets catalog."""

    def read(self, catalog) -> None:
        """
        Run the operation against the catalog.

        Raises:
            CatalogExtractionError: If the operation cannot complete
        """
        raise NotImplementedError


class CompoundOperation(Operation):
    """Runs a sequence of operations against the same catalog."""

    def __init__(self, operations: Sequence[Operation]):
        self.operations: List[Operation] = list(operations)

    def read(self, catalog) -> None:
        # Side effects of operations that already ran are kept on failure
        for operation in self.operations:
            operation.read(catalog)
