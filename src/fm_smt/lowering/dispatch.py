from typing import Iterable, Mapping


def check_exhaustive(handlers: Mapping[type, str], node_types: Iterable[type], kind: str) -> None:
    """
    Fail at import time when a node type of a closed AST has no handler.

    Raises:
        TypeError: listing the unhandled node types
    """
    missing = [t.__name__ for t in node_types if t not in handlers]
    if missing:
        raise TypeError(f"{kind} lowering has no handler for: {', '.join(missing)}")
