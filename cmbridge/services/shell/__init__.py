"""Running the cm executable."""

from .runner import CmCommandRunner, raise_for_outcome
from .temp_files import scoped_report_file, scoped_text_file

__all__ = ["CmCommandRunner", "raise_for_outcome", "scoped_report_file", "scoped_text_file"]
