from pathlib import Path

class IgnoreRules:
    """
    Central logic for what files the inbox scanner should skip.
    """

    # Handled blobs are moved here by the scanner
    PROCESSED_DIR = "processed"
    FAILED_DIR = "failed"

    # Exact folder/file names to ignore
    IGNORED_NAMES = {
        ".DS_Store", "Thumbs.db", "desktop.ini",
        "__pycache__", PROCESSED_DIR, FAILED_DIR
    }

    # Partial downloads/uploads and scratch files
    IGNORED_EXTENSIONS = {
        ".tmp", ".part", ".partial", ".crdownload", ".swp", ".log"
    }

    @classmethod
    def should_ignore(cls, path: Path) -> bool:
        """
        Returns True if the file/folder should be skipped.
        """
        if path.name in cls.IGNORED_NAMES:
            return True

        # Hidden files include in-flight blob uploads (".upload-*")
        if path.name.startswith("."):
            return True

        if path.suffix.lower() in cls.IGNORED_EXTENSIONS:
            return True

        return False
