"""
Result parsers for cm output.

Each parser turns the text or XML report of one cm command into domain
models. Parsers never run processes; the operation workers feed them.
"""

from .branches import parse_branches_xml
from .changelists import (
    SHELVE_DIFF_FORMAT,
    changelist_shelve_prefix,
    match_shelves,
    parse_changelists_xml,
    parse_shelve_created,
    parse_shelve_diff,
    parse_shelve_diff_revisions,
    parse_shelves_xml,
)
from .changesets import parse_changeset_log_xml, parse_changesets_xml
from .checkin import changeset_number, parse_checkin_results
from .common import UserNameMapper, UserNames, load_xml, parse_date
from .errors import filter_lines, remove_redundant_errors
from .history import DEFAULT_HISTORY_LIMIT, apply_history, file_state_to_action, parse_history_xml
from .locks import LOCK_LIST_FORMAT, parse_lock, parse_locks
from .merge import parse_merge_conflict, parse_merge_conflicts, parse_merge_progress
from .status import (
    FIELD_SEPARATOR,
    FILEINFO_FORMAT,
    needs_fileinfo,
    normalize_path,
    parse_directory_status,
    parse_file_status,
    parse_fileinfo,
    parse_status_line,
    parse_status_lines,
    state_from_token,
)
from .update import parse_merge_results, parse_update_results, parse_update_results_xml
from .workspace import (
    get_changeset_from_status,
    parse_profile_info,
    parse_version,
    parse_workspace_info,
    parse_workspace_name,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "FIELD_SEPARATOR",
    "FILEINFO_FORMAT",
    "LOCK_LIST_FORMAT",
    "SHELVE_DIFF_FORMAT",
    "UserNameMapper",
    "UserNames",
    "apply_history",
    "changelist_shelve_prefix",
    "changeset_number",
    "file_state_to_action",
    "filter_lines",
    "get_changeset_from_status",
    "load_xml",
    "match_shelves",
    "needs_fileinfo",
    "normalize_path",
    "parse_branches_xml",
    "parse_changelists_xml",
    "parse_changeset_log_xml",
    "parse_changesets_xml",
    "parse_checkin_results",
    "parse_date",
    "parse_directory_status",
    "parse_file_status",
    "parse_fileinfo",
    "parse_history_xml",
    "parse_lock",
    "parse_locks",
    "parse_merge_conflict",
    "parse_merge_conflicts",
    "parse_merge_progress",
    "parse_merge_results",
    "parse_profile_info",
    "parse_shelve_created",
    "parse_shelve_diff",
    "parse_shelve_diff_revisions",
    "parse_shelves_xml",
    "parse_status_line",
    "parse_status_lines",
    "parse_update_results",
    "parse_update_results_xml",
    "parse_version",
    "parse_workspace_info",
    "parse_workspace_name",
    "remove_redundant_errors",
    "state_from_token",
]
