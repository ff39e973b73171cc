"""GTN Manager core library: item model, catalog and engines.

Public API re-exports for convenient imports:
    from gtn import Catalog, key_order, rank_by_progress, full_text_search, ...
"""

# Workspace & paths
from gtn.workspace import (
    workspace_root,
    config_path,
    data_path,
    log_path,
    load_settings,
    init_workspace,
    setup_logging,
)

# File I/O
from gtn.fileio import (
    read_text,
    read_yaml,
    write_lines_atomic,
    write_yaml_atomic,
)

# Models
from gtn.models import (
    Item,
    Task,
    Note,
    Goal,
    Settings,
    item_from_dict,
    family_of,
    NOT_QUANTIFIED,
    KIND_LABELS,
    FAMILY_TASK,
    FAMILY_NOTE,
    FAMILY_GOAL,
    FAMILY_KINDS,
)

# Catalog
from gtn.catalog import (
    Catalog,
    create_item,
    validate_item,
    parse_priority,
    parse_progress,
    parse_tags,
)

# Engines
from gtn.ordering import key_order, KEY_PRIORITY, KEY_DEADLINE
from gtn.ranking import rank_by_progress
from gtn.search import kmp_table, kmp_search, full_text_search, search_by_tag

# Access
from gtn.access import AccessGate, check_password

# Ingestion
from gtn.ingest import ingest, dump_line, parse_lines, load_catalog, save_catalog
