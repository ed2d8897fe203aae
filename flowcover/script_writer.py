"""Rendering of coverage-target records into a pytest skeleton."""

from pathlib import Path

from loguru import logger

from .analysis.targets import CoverageTargetRecord
from .config import AppConfig, settings


class TestScriptWriter:
    """Writes one ``test_<function>__<target>`` stub per record."""

    __test__ = False  # not a pytest class

    def __init__(self, config: AppConfig | None = None):
        self.config = config or settings

    def render_function(
        self, function_name: str, records: list[CoverageTargetRecord]
    ) -> str:
        indent = self.config.indent
        chunks = []
        for record in records:
            comment = "\n".join(f"# {line}" for line in record.description.splitlines())
            body = record.body or "pass"
            body_lines = "\n".join(f"{indent}{line}" for line in body.splitlines())
            chunks.append(
                f"{comment}\n"
                f"def test_{function_name}__{record.name}():\n"
                f"{body_lines}\n"
            )
        return "\n\n".join(chunks)

    def render(
        self,
        sections: dict[str, list[CoverageTargetRecord]],
        module: str | None = None,
    ) -> str:
        """Whole test module text; ``sections`` maps function name to records."""
        header = ['"""Generated coverage test skeleton."""', ""]
        if module:
            # Methods and nested functions are reached through their outermost name.
            names = ", ".join(sorted({name.split(".")[0] for name in sections}))
            header += [f"from {module} import {names}  # noqa: F401", ""]
        parts = [
            self.render_function(name.replace(".", "_"), records)
            for name, records in sections.items()
            if records
        ]
        return "\n".join(header) + "\n\n" + "\n\n".join(parts) + "\n"

    def default_path(self, source_path: Path) -> Path:
        return source_path.with_name(f"{self.config.test_file_prefix}{source_path.name}")

    def write(self, text: str, path: Path) -> Path:
        path.write_text(text, encoding="utf-8")
        logger.info(f"Wrote test skeleton to {path}")
        return path
