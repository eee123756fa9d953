"""
Model class for the Assembler application.
Holds the selected source files and the results of assembling them.
"""

from pathlib import Path

from assembler import assemble_files
from report import format_result


class AssemblerModel:
    def __init__(self, output_dir=None, optab=None):
        self.target_files = []
        self.output_dir = output_dir
        self.optab = optab
        self.results = []
        self.status = "Ready"
        self.is_running = False

    def set_files(self, file_paths):
        """Set the source files to assemble, in order"""
        self.target_files = [str(p) for p in file_paths if str(p).strip()]
        self.results = []
        if len(self.target_files) == 1:
            self.status = f"Loaded: {self.target_files[0]}"
        else:
            self.status = f"Loaded {len(self.target_files)} files"

    def set_file(self, file_path):
        """Set a single target file path"""
        self.set_files([file_path])

    def get_files(self):
        return list(self.target_files)

    def get_status(self):
        return self.status

    def set_status(self, status):
        self.status = status

    def is_file_loaded(self):
        """Check if at least one file is loaded"""
        return bool(self.target_files)

    def assemble(self):
        """
        Assemble every loaded file.
        Returns True if all of them assembled, False otherwise.
        """
        if not self.is_file_loaded():
            self.status = "No file selected to run"
            return False

        self.is_running = True
        self.status = "Running assembly..."
        try:
            self.results = assemble_files(self.target_files, self.output_dir, self.optab)
        finally:
            self.is_running = False

        failed = [r for r in self.results if r.error_kind is not None]
        if not failed:
            names = ", ".join(Path(r.source).name for r in self.results)
            self.status = f"Assembly completed for: {names}"
        else:
            self.status = f"Assembly failed for {len(failed)} of {len(self.results)} files"
        return not failed

    def get_report(self):
        """Combined report text for the last assembly run"""
        return "\n".join(format_result(r, self.optab) for r in self.results)

    def clear_file(self):
        """Clear the currently loaded files"""
        self.target_files = []
        self.results = []
        self.status = "No file selected"
