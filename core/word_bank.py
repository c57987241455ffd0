"""Word bank: named word lists loaded from JSON files."""

import json
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from core.errors import EmptyWordBank, UnknownWordList, WordBankLoadError
from core.models import WordList

log = logging.getLogger("typeracer.word_bank")


class WordBank:
    """Mapping from list name to WordList.

    Only the event loop mutates the bank; session construction reads a
    snapshot of a single list.
    """

    def __init__(self, word_lists: Optional[Iterable[WordList]] = None):
        self.word_lists: Dict[str, WordList] = {}
        for word_list in word_lists or []:
            self.word_lists[word_list.name] = word_list

    def __len__(self) -> int:
        return len(self.word_lists)

    def get(self, name: str) -> Optional[WordList]:
        return self.word_lists.get(name)

    def get_words(self, name: str) -> Optional[List[str]]:
        word_list = self.word_lists.get(name)
        if word_list is None:
            return None
        return word_list.words

    def contains(self, name: str) -> bool:
        return name in self.word_lists

    def set(self, word_list: WordList) -> None:
        """Add or replace a word list."""
        replaced = word_list.name in self.word_lists
        self.word_lists[word_list.name] = word_list
        log.info(
            f"{'Replaced' if replaced else 'Added'} word list '{word_list.name}' "
            f"({len(word_list.words)} words)"
        )

    def names(self) -> List[str]:
        return sorted(self.word_lists)

    def snapshot(self, name: str) -> Tuple[str, ...]:
        """Return an immutable copy of a list's words.

        Raises:
            UnknownWordList: If no list has that name
            EmptyWordBank: If the list has no words
        """
        word_list = self.word_lists.get(name)
        if word_list is None:
            raise UnknownWordList(f"word list '{name}' not found")
        if not word_list.words:
            raise EmptyWordBank(f"word list '{name}' is empty")
        return tuple(word_list.words)


def read_word_list(path: Path) -> WordList:
    """Read and validate one word list file.

    Raises:
        WordBankLoadError: If the file cannot be read or is invalid
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return WordList.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise WordBankLoadError(f"could not load word list {path}: {e}") from e


def load_word_bank(dir_path: Path, max_workers: int = 4) -> WordBank:
    """Load every ``*.json`` word list in a directory concurrently.

    The first failure cancels the remaining loads and no partial bank is
    returned.

    Args:
        dir_path: Directory with word list files
        max_workers: Maximum concurrent loads

    Returns:
        WordBank with all lists

    Raises:
        WordBankLoadError: If the directory or any file cannot be loaded
    """
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        raise WordBankLoadError(f"word list directory not found: {dir_path}")

    paths = sorted(dir_path.glob("*.json"))
    loaded: Dict[str, WordList] = {}
    lock = threading.Lock()

    def load_one(path: Path) -> None:
        word_list = read_word_list(path)
        with lock:
            loaded[word_list.name] = word_list

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [executor.submit(load_one, path) for path in paths]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for future in pending:
            future.cancel()

        for future in done:
            error = future.exception()
            if error is not None:
                log.error(f"Word bank load failed: {error}")
                if isinstance(error, WordBankLoadError):
                    raise error
                raise WordBankLoadError(str(error)) from error

    log.info(f"Loaded {len(loaded)} word lists from {dir_path}")
    return WordBank(loaded.values())


def save_word_list(word_list: WordList, dir_path: Path) -> Path:
    """Write a word list as ``<name>.json`` in the given directory.

    Returns:
        Path of the written file
    """
    dir_path = Path(dir_path)
    dir_path.mkdir(parents=True, exist_ok=True)
    path = dir_path / f"{word_list.name}.json"

    with open(path, "w", encoding="utf-8") as f:
        json.dump(word_list.model_dump(by_alias=True), f, indent=2)

    log.info(f"Saved word list '{word_list.name}' to {path}")
    return path
