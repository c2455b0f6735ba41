"""English word lookups used to validate Word Rush submissions."""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Set, Union

from urllib import parse, request
from urllib.error import HTTPError, URLError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/"
USER_AGENT = "wordrush-bot/1.0"
REQUEST_TIMEOUT = 10


class DictionaryUnavailable(RuntimeError):
    """The dictionary could not answer; the result must not be cached."""


def lookup_english_word(word: str, *, api_url: Optional[str] = None) -> Optional[bool]:
    """Return whether ``word`` has an entry in the Free Dictionary API.

    ``True`` for an entry, ``False`` for HTTP 404 and ``None`` when the
    service could not give an answer.  The network call goes through
    ``urllib`` so it can be easily mocked in tests.
    """

    base = api_url or os.environ.get("DICTIONARY_API_URL") or DEFAULT_API_URL
    url = f"{base.rstrip('/')}/{parse.quote(word.lower())}"
    req = request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with request.urlopen(req, timeout=REQUEST_TIMEOUT) as resp:  # pragma: no cover - network
            data = json.loads(resp.read())
    except HTTPError as e:
        if e.code == 404:
            return False
        logger.exception("Dictionary HTTP error: %s", e)
        return None
    except URLError as e:  # pragma: no cover - network errors
        logger.exception("Dictionary URL error: %s", e.reason)
        return None
    except json.JSONDecodeError as e:
        logger.exception("Dictionary JSON error: %s", e)
        return None

    if isinstance(data, list) and data:
        return True
    logger.info("Unexpected dictionary payload for word '%s'", word)
    return None


class ApiDictionary:
    """Async adapter around :func:`lookup_english_word`."""

    def __init__(self, api_url: Optional[str] = None) -> None:
        self._api_url = api_url

    async def is_valid_word(self, word: str) -> bool:
        result = await asyncio.to_thread(lookup_english_word, word, api_url=self._api_url)
        if result is None:
            raise DictionaryUnavailable(f"no dictionary answer for {word!r}")
        return result


def _normalize_word(value: str) -> str:
    return value.strip().lower()


def load_word_list(path: Union[str, Path]) -> Set[str]:
    """Read words from a plain list (one per line) or JSONL with a ``word`` key."""

    words: Set[str] = set()
    path = Path(path)
    if not path.exists():
        logger.warning("Word list %s does not exist", path)
        return words
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("{"):
            try:
                payload = json.loads(line)
            except json.JSONDecodeError:
                continue
            word = payload.get("word")
            if not isinstance(word, str):
                continue
            line = word
        words.add(_normalize_word(line))
    return words


class StaticDictionary:
    """In-memory dictionary backed by a fixed set of words."""

    def __init__(self, words: Iterable[str]) -> None:
        self._words = {_normalize_word(word) for word in words if word and word.strip()}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticDictionary":
        return cls(load_word_list(path))

    async def is_valid_word(self, word: str) -> bool:
        return _normalize_word(word) in self._words

    def __len__(self) -> int:
        return len(self._words)


def build_dictionary() -> Union[ApiDictionary, StaticDictionary]:
    """Use ``WORDRUSH_WORDLIST_PATH`` when set, the online API otherwise."""

    wordlist = os.environ.get("WORDRUSH_WORDLIST_PATH")
    if wordlist:
        dictionary = StaticDictionary.from_file(wordlist)
        logger.info("Loaded %s words from %s", len(dictionary), wordlist)
        return dictionary
    return ApiDictionary()
