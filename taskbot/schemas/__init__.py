"""Schema modules."""
from taskbot.schemas.task import TaskRecord, UpdateRecord
from taskbot.schemas.directory import DirectoryEntry, FavoriteRecord
from taskbot.schemas.installation import InstallationRecord
from taskbot.schemas.payloads import (
    ButtonValue,
    ModalState,
    NavigationContext,
    TaskFormState,
    UpdateFormState,
    ViewMode,
)
