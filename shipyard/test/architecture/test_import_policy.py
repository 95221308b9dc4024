from __future__ import annotations

import ast
from pathlib import Path


def _package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _source_files() -> list[tuple[str, ast.AST]]:
    root = _package_root()
    files: list[tuple[str, ast.AST]] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        source = path.read_text(encoding="utf-8")
        files.append((rel.as_posix(), ast.parse(source, filename=str(path))))
    return files


def _imported_modules(tree: ast.AST) -> list[tuple[str, int]]:
    found: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            found.append((node.module, node.lineno))
    return found


def test_subprocess_only_in_process_module() -> None:
    offenders = [
        f"{rel}:{line}"
        for rel, tree in _source_files()
        for module, line in _imported_modules(tree)
        if module == "subprocess" and rel != "platform/process.py"
    ]
    assert not offenders, "subprocess imported outside platform/process.py:\n" + "\n".join(
        offenders
    )


def test_rich_only_in_output_and_cli() -> None:
    offenders = [
        f"{rel}:{line}"
        for rel, tree in _source_files()
        for module, line in _imported_modules(tree)
        if (module == "rich" or module.startswith("rich."))
        and rel not in {"output/console.py", "cli/commands/targets_cmd.py"}
    ]
    assert not offenders, "direct rich import:\n" + "\n".join(offenders)


def test_services_do_not_import_cli() -> None:
    offenders = [
        f"{rel}:{line}"
        for rel, tree in _source_files()
        for module, line in _imported_modules(tree)
        if rel.startswith(("core/", "platform/", "services/"))
        and module.startswith("shipyard.cli")
    ]
    assert not offenders, "layering violation:\n" + "\n".join(offenders)
