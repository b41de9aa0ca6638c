"""
Flake8 plugin to enforce hexagonal architecture rules.

Prevents illegal imports across architectural layers of the pistebot package.
"""

import ast
from pathlib import Path
from typing import Any, Generator, Iterable, List, Tuple, Type

PACKAGE = "pistebot"


class HexagonalArchitectureChecker:
    """
    Flake8 plugin to enforce hexagonal architecture boundaries.

    Rules:
    - HEX001: Domain layer cannot import from infrastructure or application
    - HEX002: Application layer cannot import from infrastructure
    - HEX003: Use port interfaces instead of concrete implementations
    """

    name = "flake8-hexagonal"
    version = "1.1.0"

    def __init__(self, tree: ast.AST, filename: str):
        self.tree = tree
        self.filename = Path(filename)

    def run(self) -> Generator[Tuple[int, int, str, Type[Any]], None, None]:
        """Run the checker and yield errors."""
        current_layer = get_layer(self.filename)

        if current_layer in ["domain", "application"]:
            visitor = ImportVisitor(current_layer)
            visitor.visit(self.tree)

            for error in visitor.errors:
                yield error


def get_layer(filepath: Path) -> str:
    """Determine which layer a file belongs to."""
    parts = filepath.parts
    if PACKAGE not in parts:
        return "other"
    layer_parts = parts[parts.index(PACKAGE) + 1:]

    if "domain" in layer_parts:
        return "domain"
    elif "application" in layer_parts:
        return "application"
    elif "infrastructure" in layer_parts:
        return "infrastructure"
    else:
        return "other"


class ImportVisitor(ast.NodeVisitor):
    """AST visitor to check imports."""

    # Concrete implementations that should be reached through ports
    concrete_implementations = {
        "JsonApiLedgerClient": "ILedgerClient",
        "InMemoryLedgerClient": "ILedgerClient",
        "LedgerConnector": "ILedgerClient",
        "TelegramNotifier": "INotificationSink",
        "LoggingNotifier": "INotificationSink",
        "RecordingNotifier": "INotificationSink",
        "SettlementFileWriter": "ISettlementSink",
        "InMemorySettlementSink": "ISettlementSink",
        "FileOffsetStore": "IOffsetStore",
        "InMemoryOffsetStore": "IOffsetStore",
    }

    def __init__(self, current_layer: str):
        self.current_layer = current_layer
        self.errors: List[Tuple[int, int, str, Type[Any]]] = []

    def visit_Import(self, node: ast.Import) -> None:
        """Check import statements."""
        for alias in node.names:
            self._check_import(alias.name, node.lineno, node.col_offset)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        """Check from...import statements."""
        if not node.module:
            return

        self._check_import(node.module, node.lineno, node.col_offset)

        for alias in node.names:
            imported_name = alias.name
            if imported_name in self.concrete_implementations:
                port_name = self.concrete_implementations[imported_name]
                self.errors.append((
                    node.lineno,
                    node.col_offset,
                    f"HEX003 Use port interface '{port_name}' instead of concrete implementation '{imported_name}'",
                    HexagonalArchitectureChecker
                ))

    def _check_import(self, module_name: str, lineno: int, col_offset: int) -> None:
        """Check if an import is allowed."""
        if not module_name.startswith(PACKAGE + "."):
            return
        target = module_name.split(".")[1]

        if self.current_layer == "domain" and target in ("infrastructure", "application"):
            self.errors.append((
                lineno,
                col_offset,
                f"HEX001 Domain layer cannot import from {target}: {module_name}",
                HexagonalArchitectureChecker
            ))
        elif self.current_layer == "application" and target == "infrastructure":
            self.errors.append((
                lineno,
                col_offset,
                f"HEX002 Application layer cannot import from infrastructure: {module_name}",
                HexagonalArchitectureChecker
            ))


def check_paths(paths: Iterable[Path]) -> List[str]:
    """
    Check source files outside of flake8.

    Returns:
        ``path:line:col: message`` for every violation
    """
    violations = []
    for path in paths:
        tree = ast.parse(Path(path).read_text(encoding="utf-8"), filename=str(path))
        for lineno, col, message, _ in HexagonalArchitectureChecker(tree, str(path)).run():
            violations.append(f"{path}:{lineno}:{col}: {message}")
    return violations
