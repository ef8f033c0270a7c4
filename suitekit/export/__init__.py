"""Tab-delimited export of suite trees with inherited properties."""

from suitekit.export.exporter import (
    DEFAULT_EXPORT_FILE,
    DEFAULT_JOINERS,
    ExportSink,
    ExportTable,
    FileExportSink,
    build_export_table,
    export,
    export_tree_to_file,
    export_tree_to_sink,
)

__all__ = [
    "DEFAULT_EXPORT_FILE",
    "DEFAULT_JOINERS",
    "ExportSink",
    "ExportTable",
    "FileExportSink",
    "build_export_table",
    "export",
    "export_tree_to_file",
    "export_tree_to_sink",
]
