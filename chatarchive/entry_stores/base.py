from typing import List, Protocol

from chatarchive.domain.entry import Entry


class EntryStore(Protocol):
    def get_by_id(self, entry_id: str) -> Entry | None:
        """Get an entry by its ID."""
        ...

    def get_all_except(self, entry_id: str) -> List[Entry]:
        """Get every entry other than the given one."""
        ...

    def get_all(self) -> List[Entry]:
        """Get every entry in the archive, oldest first."""
        ...

    def get_entries_by_ids(self, entry_ids: list[str]) -> dict[str, Entry]:
        """Get multiple entries by their IDs, returning a dictionary mapping ID to Entry.

        Args:
            entry_ids: List of entry IDs to retrieve

        Returns:
            Dictionary mapping entry_id to Entry for all found entries
        """
        ...

    def update_entry(self, entry: Entry) -> None:
        """Add a new entry or update an existing one."""
        ...

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Unknown IDs are ignored."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...
