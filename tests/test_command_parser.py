"""Tests for the rule-based command parser."""

from __future__ import annotations

import pytest

from chatorg.organization.models import (
    CreateNestedFolderIntent,
    CreateSimpleFolderIntent,
    DeleteFolderIntent,
    InfoIntent,
    ListIntent,
    MoveAllByExtensionIntent,
    MoveFileIntent,
    OpenFolderIntent,
    RenameFolderIntent,
    ResetIntent,
    UndoIntent,
)
from chatorg.organization.planner import HELP_TEXT, CommandParser, fix_name, slugify
from chatorg.state.defaults import default_store
from chatorg.state.models import EntityStore, FileRecord, FolderRecord


@pytest.fixture
def parser() -> CommandParser:
    return CommandParser()


@pytest.fixture
def store() -> EntityStore:
    return default_store()


@pytest.mark.parametrize("text", ["undo", "  Revert ", "go back", "REVERSE", "cancel"])
def test_undo_synonyms(parser: CommandParser, store: EntityStore, text: str) -> None:
    assert isinstance(parser.parse(text, store), UndoIntent)


@pytest.mark.parametrize("text", ["reset", "clear all", "Start Over", "restore default"])
def test_reset_synonyms(parser: CommandParser, store: EntityStore, text: str) -> None:
    assert isinstance(parser.parse(text, store), ResetIntent)


def test_undo_requires_exact_phrase(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("please undo that", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == HELP_TEXT


def test_rename_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("rename Images to Pictures", store)

    assert isinstance(intent, RenameFolderIntent)
    assert intent.folder_id == "images"
    assert intent.old_name == "Images"
    assert intent.new_name == "Pictures"
    assert intent.summary == 'Renamed "Images" to "Pictures".'


def test_rename_to_other_folders_name_is_rejected(
    parser: CommandParser, store: EntityStore
) -> None:
    intent = parser.parse("rename folder images to documents", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'A folder named "Documents" already exists.'


def test_rename_to_own_name_is_accepted(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("rename images to images", store)

    assert isinstance(intent, RenameFolderIntent)
    assert intent.new_name == "Images"


def test_rename_unknown_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("rename Archive to Old", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'I couldn\'t find a folder named "archive".'


@pytest.mark.parametrize("text", ["delete Documents folder", "delete folder documents"])
def test_delete_folder(parser: CommandParser, store: EntityStore, text: str) -> None:
    intent = parser.parse(text, store)

    assert isinstance(intent, DeleteFolderIntent)
    assert intent.folder_id == "documents"
    assert intent.summary == 'Deleted "Documents" folder.'


def test_delete_unknown_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("delete Archive", store)

    assert isinstance(intent, InfoIntent)
    assert "couldn't find a folder" in intent.summary


def test_create_nested_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("create folder Photos inside Media", store)

    assert isinstance(intent, CreateNestedFolderIntent)
    assert intent.new_folder_name == "Photos"
    assert intent.parent_folder_id == "media"
    assert intent.summary == 'Created "Photos" folder inside Media.'


def test_nested_pattern_wins_over_simple(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("create a new folder called invoices in documents", store)

    assert isinstance(intent, CreateNestedFolderIntent)
    assert intent.new_folder_name == "Invoices"
    assert intent.parent_folder_id == "documents"


def test_create_nested_duplicate_under_same_parent(parser: CommandParser) -> None:
    store = default_store()
    store.folders.append(FolderRecord(id="media-photos-1", name="Photos", parent="media"))

    intent = parser.parse("create folder photos under media", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'A folder named "Photos" already exists inside Media.'


def test_create_nested_same_name_under_other_parent(parser: CommandParser) -> None:
    store = default_store()
    store.folders.append(FolderRecord(id="media-photos-1", name="Photos", parent="media"))

    intent = parser.parse("create folder photos within documents", store)

    assert isinstance(intent, CreateNestedFolderIntent)


def test_create_nested_missing_parent(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("create folder Photos inside Nowhere", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'I couldn\'t find a folder named "nowhere".'


def test_create_simple_folder_normalizes_name(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("create a new folder named my   stuff", store)

    assert isinstance(intent, CreateSimpleFolderIntent)
    assert intent.new_folder_name == "My stuff"
    assert intent.summary == 'Created "My stuff" folder.'


def test_create_simple_duplicate_is_case_insensitive(parser: CommandParser) -> None:
    store = default_store()
    store.folders.append(FolderRecord(id="projects-1", name="Projects"))

    intent = parser.parse("create folder called projects", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'A folder named "Projects" already exists.'


def test_move_all_by_extension_to_existing_folder(
    parser: CommandParser, store: EntityStore
) -> None:
    intent = parser.parse("move all png files to Images", store)

    assert isinstance(intent, MoveAllByExtensionIntent)
    assert intent.file_extension == "png"
    assert intent.create_folder is False
    assert intent.target_folder.id == "images"
    assert intent.file_names == ["vacation.png", "screenshot.png"]
    assert intent.file_count == 2
    assert intent.summary == "Moved 2 png file(s) to Images."


def test_move_all_to_missing_folder_builds_placeholder(
    parser: CommandParser, store: EntityStore
) -> None:
    intent = parser.parse("move all jpg into holiday pics", store)

    assert isinstance(intent, MoveAllByExtensionIntent)
    assert intent.create_folder is True
    assert intent.target_folder.id == "holiday-pics"
    assert intent.target_folder.name == "Holiday pics"
    assert intent.file_names == ["photo1.jpg"]


def test_move_all_without_matches(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("move all gif files to Images", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == "No gif files found."


def test_move_single_file(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("move VACATION.PNG into images", store)

    assert isinstance(intent, MoveFileIntent)
    assert intent.file_name == "vacation.png"
    assert intent.target_folder.id == "images"
    assert intent.create_folder is False
    assert intent.summary == 'Moved "vacation.png" to Images.'


def test_move_single_to_new_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("move notes.txt to work notes", store)

    assert isinstance(intent, MoveFileIntent)
    assert intent.create_folder is True
    assert intent.target_folder.id == "work-notes"
    assert intent.summary == 'Created "Work notes" folder and moved "notes.txt" into it.'


def test_move_single_unknown_file(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("move ghost.png to Images", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == 'I couldn\'t find a file named "ghost.png".'


@pytest.mark.parametrize("text", ["list files", "show all folders", "display files"])
def test_list(parser: CommandParser, store: EntityStore, text: str) -> None:
    intent = parser.parse(text, store)

    assert isinstance(intent, ListIntent)
    assert intent.summary == "You have 8 file(s) and 3 folder(s)."


def test_open_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("open Media", store)

    assert isinstance(intent, OpenFolderIntent)
    assert intent.folder_id == "media"
    assert intent.summary == "Opening Media folder."


def test_open_unknown_folder(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("open folder nowhere", store)

    assert isinstance(intent, InfoIntent)


def test_fallback_help(parser: CommandParser, store: EntityStore) -> None:
    intent = parser.parse("what's the weather like", store)

    assert isinstance(intent, InfoIntent)
    assert intent.summary == HELP_TEXT


def test_folder_lookup_priority() -> None:
    store = EntityStore(
        folders=[
            FolderRecord(id="archive-old", name="Old stuff"),
            FolderRecord(id="misc", name="Archive"),
        ]
    )

    # Exact name wins over an earlier id-substring match.
    assert store.find_folder(" ARCHIVE ").id == "misc"
    assert store.find_folder("misc").id == "misc"
    assert store.find_folder("old").id == "archive-old"
    assert store.find_folder("nothing") is None


def test_parse_does_not_mutate_store(parser: CommandParser) -> None:
    store = EntityStore(files=[FileRecord(id=1, name="a.png")])
    before = store.model_dump()

    parser.parse("move all png files to Images", store)
    parser.parse("create folder called Images", store)

    assert store.model_dump() == before


def test_fix_name_and_slugify() -> None:
    assert fix_name("  summer   photos ") == "Summer photos"
    assert fix_name("x") == "X"
    assert slugify("Summer  Photos") == "summer-photos"
