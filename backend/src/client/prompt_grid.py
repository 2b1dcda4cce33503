"""
Client-side state for the prompt grid and its create/edit dialog.

The grid owns a local copy of the user's prompts. It is seeded once from the
page load and never re-fetched; every later change is applied from the record a
mutation action returns. There is no optimistic pre-update, so a failed action
leaves the list untouched and needs no rollback.

The dialog has two modes (create, edit), distinguished by `editing_id`, and two
phases (idle, submitting), tracked by `is_submitting`.
"""
import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from schemas.prompt import PromptCreate, PromptResponse, PromptUpdate
from services.exceptions import PromptActionError

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save prompt"
DELETE_FAILED_MESSAGE = "Failed to delete prompt"


class PromptActions(Protocol):
    """The three mutation actions the grid depends on."""

    async def create_prompt(self, fields: PromptCreate) -> PromptResponse: ...

    async def update_prompt(self, prompt_id: int, fields: PromptUpdate) -> PromptResponse: ...

    async def delete_prompt(self, prompt_id: int) -> None: ...


class Clipboard(Protocol):
    """Destination for the copy action."""

    def write(self, text: str) -> None: ...


class MemoryClipboard:
    """Clipboard that keeps the last copied text in memory."""

    def __init__(self) -> None:
        self.text: str | None = None

    def write(self, text: str) -> None:
        self.text = text


@dataclass
class PromptForm:
    """Current values of the dialog's form fields."""

    name: str = ""
    description: str = ""
    content: str = ""

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty or whitespace-only."""
        return [
            name
            for name in ("name", "description", "content")
            if not getattr(self, name).strip()
        ]


@dataclass
class PromptGrid:
    """
    View state for a user's prompt grid.

    Args:
        prompts: Initial list from the page's server-side fetch, newest first.
        actions: Mutation actions (in-process or over HTTP).
        clipboard: Where the copy action writes prompt content.
    """

    prompts: list[PromptResponse]
    actions: PromptActions
    clipboard: Clipboard = field(default_factory=MemoryClipboard)
    is_dialog_open: bool = False
    form: PromptForm = field(default_factory=PromptForm)
    is_submitting: bool = False
    error: str | None = None
    editing_id: int | None = None
    copied_id: int | None = None
    pending_deletes: set[int] = field(default_factory=set)

    def __post_init__(self) -> None:
        # The caller's list is never mutated
        self.prompts = list(self.prompts)

    @property
    def is_empty(self) -> bool:
        """True when there are no prompts to show."""
        return not self.prompts

    @property
    def mode(self) -> Literal["create", "edit"]:
        """Dialog mode, derived from whether an edit target is set."""
        return "edit" if self.editing_id is not None else "create"

    def get(self, prompt_id: int) -> PromptResponse | None:
        """Return the prompt with the given id from the local list, if present."""
        return next((p for p in self.prompts if p.id == prompt_id), None)

    def open_create(self) -> None:
        """Open the dialog with an empty form and no edit target."""
        self.editing_id = None
        self.form = PromptForm()
        self.error = None
        self.is_dialog_open = True

    def open_edit(self, prompt_id: int) -> None:
        """
        Open the dialog pre-filled from an existing prompt.

        Raises:
            LookupError: If the prompt is not in the local list.
        """
        prompt = self.get(prompt_id)
        if prompt is None:
            raise LookupError(f"Prompt {prompt_id} is not in the grid")
        self.editing_id = prompt.id
        self.form = PromptForm(
            name=prompt.name,
            description=prompt.description,
            content=prompt.content,
        )
        self.error = None
        self.is_dialog_open = True

    def open_edit_target(self, prompt_id: int) -> None:
        """
        Open the dialog in edit mode for `prompt_id` with an empty form.

        Unlike open_edit, the prompt need not be in the local list: a form posted
        for a record that has since been deleted still reaches the update action,
        which reports the failure.
        """
        self.editing_id = prompt_id
        self.form = PromptForm()
        self.error = None
        self.is_dialog_open = True

    def update_form(
        self,
        *,
        name: str | None = None,
        description: str | None = None,
        content: str | None = None,
    ) -> None:
        """Set any of the form fields; None leaves a field unchanged."""
        if name is not None:
            self.form.name = name
        if description is not None:
            self.form.description = description
        if content is not None:
            self.form.content = content

    def close_dialog(self) -> bool:
        """
        Close the dialog and reset the form.

        Returns:
            False (and leaves the dialog open) while a submission is in flight.
        """
        if self.is_submitting:
            return False
        self._reset_dialog()
        return True

    async def submit(self) -> bool:
        """
        Submit the dialog form as a create or an update.

        A call made while another submission is in flight is ignored. On success
        the returned record is spliced into the list and the dialog is closed; on
        failure the message is shown inline and the dialog stays open.

        Returns:
            True if a mutation succeeded.
        """
        if self.is_submitting:
            return False

        missing = self.form.missing_fields()
        if missing:
            self.error = f"Required field(s) missing: {', '.join(missing)}"
            return False

        self.is_submitting = True
        self.error = None
        try:
            if self.editing_id is not None:
                saved = await self.actions.update_prompt(
                    self.editing_id, PromptUpdate(**self._form_values()),
                )
                self.prompts = [saved if p.id == saved.id else p for p in self.prompts]
            else:
                saved = await self.actions.create_prompt(PromptCreate(**self._form_values()))
                self.prompts = [saved, *self.prompts]
        except PromptActionError as e:
            logger.warning("Prompt %s failed: %s", self.mode, e)
            self.error = e.message or SAVE_FAILED_MESSAGE
            return False
        finally:
            self.is_submitting = False

        self._reset_dialog()
        return True

    async def delete(self, prompt_id: int) -> bool:
        """
        Delete a prompt and remove it from the local list.

        Returns:
            True if deleted; False on failure or if a delete for the same prompt
            is already in flight.
        """
        if prompt_id in self.pending_deletes:
            return False

        self.pending_deletes.add(prompt_id)
        try:
            await self.actions.delete_prompt(prompt_id)
        except PromptActionError as e:
            logger.warning("Prompt delete failed: %s", e)
            self.error = e.message or DELETE_FAILED_MESSAGE
            return False
        finally:
            self.pending_deletes.discard(prompt_id)

        self.prompts = [p for p in self.prompts if p.id != prompt_id]
        if self.editing_id == prompt_id and not self.is_submitting:
            self._reset_dialog()
        self.error = None
        return True

    def copy(self, prompt_id: int) -> None:
        """
        Copy a prompt's content to the clipboard.

        Raises:
            LookupError: If the prompt is not in the local list.
        """
        prompt = self.get(prompt_id)
        if prompt is None:
            raise LookupError(f"Prompt {prompt_id} is not in the grid")
        self.clipboard.write(prompt.content)
        self.copied_id = prompt_id

    def _form_values(self) -> dict[str, str]:
        return {
            "name": self.form.name,
            "description": self.form.description,
            "content": self.form.content,
        }

    def _reset_dialog(self) -> None:
        self.is_dialog_open = False
        self.editing_id = None
        self.form = PromptForm()
        self.error = None
