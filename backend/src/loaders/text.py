from pathlib import Path

from llama_index.core import SimpleDirectoryReader
from llama_index.core.schema import Document as LlamaDocument

from .base import BaseDocumentLoader

DEFAULT_EXTENSIONS = (".txt", ".md")


class TextDocumentLoader(BaseDocumentLoader):
    """Loads plain-text documents from a directory using llama-index."""

    def __init__(
        self,
        directory: Path | str,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ):
        self.directory = Path(directory)
        self.extensions = extensions

    def load(self) -> list[LlamaDocument]:
        if not self.directory.exists():
            raise FileNotFoundError(f"Directory not found: {self.directory}")

        reader = SimpleDirectoryReader(
            str(self.directory), required_exts=list(self.extensions)
        )
        return reader.load_data()

    def load_file(self, file_path: Path | str) -> list[LlamaDocument]:
        reader = SimpleDirectoryReader(input_files=[str(file_path)])
        return reader.load_data()

    def discover_files(self) -> list[Path]:
        """Supported files directly inside the directory, sorted by name."""
        if not self.directory.exists():
            return []
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and path.suffix.lower() in self.extensions
        )
