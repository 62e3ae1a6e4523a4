from .schema import DTYPES, TrialRow, participant_key
from .kv import JsonFileStore, KeyValueStore, MemoryStore, open_store
from .records import ParticipantStore, list_participants, register_participant
from .migration import migrate_participant
from .store import (
    init_store,
    validate_records,
    records_frame,
    append_trials,
    load_all,
    query_word,
    export_ndjson,
)

__all__ = [
    "DTYPES",
    "TrialRow",
    "participant_key",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "open_store",
    "ParticipantStore",
    "list_participants",
    "register_participant",
    "migrate_participant",
    "init_store",
    "validate_records",
    "records_frame",
    "append_trials",
    "load_all",
    "query_word",
    "export_ndjson",
]
