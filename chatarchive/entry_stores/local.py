import json
from pathlib import Path
from typing import Dict, List

from chatarchive.domain.entry import Entry
from chatarchive.entry_stores.base import EntryStore


class LocalEntryStore(EntryStore):
    """Local entry store that keeps the archive in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalEntryStore.

        Args:
            filepath: Path to the entry store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates an empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._entries = {
                entry_id: Entry(**entry_data) for entry_id, entry_data in data["entries"].items()
            }
        else:
            self._entries = {}

    @classmethod
    def from_data(cls, entries: Dict[str, Entry] | List[Entry] | None = None) -> "LocalEntryStore":
        """Create LocalEntryStore from provided entries (useful for testing).

        Args:
            entries: Entries keyed by ID, or a plain list of entries

        Returns:
            LocalEntryStore instance with provided data
        """
        instance = cls(filepath=None)
        if isinstance(entries, list):
            entries = {entry.id: entry for entry in entries}
        instance._entries = dict(entries or {})
        return instance

    def get_by_id(self, entry_id: str) -> Entry | None:
        """Get an entry by its ID."""
        return self._entries.get(entry_id)

    def get_all_except(self, entry_id: str) -> List[Entry]:
        """Get every entry other than the given one."""
        return [entry for entry in self.get_all() if entry.id != entry_id]

    def get_all(self) -> List[Entry]:
        """Get every entry in the archive, oldest first."""
        return sorted(self._entries.values(), key=lambda entry: entry.created_at)

    def get_entries_by_ids(self, entry_ids: list[str]) -> dict[str, Entry]:
        """Get multiple entries by their IDs, returning a dictionary mapping ID to Entry."""
        return {
            entry_id: self._entries[entry_id] for entry_id in entry_ids if entry_id in self._entries
        }

    def update_entry(self, entry: Entry) -> None:
        """Add a new entry or update an existing one."""
        self._entries[entry.id] = entry

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Unknown IDs are ignored."""
        self._entries.pop(entry_id, None)

    def save(self, filepath: str | None = None) -> None:
        """Save the entry store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        data = {
            "entries": {
                entry_id: entry.model_dump(mode="json") for entry_id, entry in self._entries.items()
            }
        }
        with open(save_path, "w") as f:
            json.dump(data, f)
