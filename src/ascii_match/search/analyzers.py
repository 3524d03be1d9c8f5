"""Analyzer utilities for the matching engine.

An analyzer is a normalizer chain followed by a tokenizer chain. Index-time
and query-time tokenizer chains are configured independently: the default
analyzer indexes shingles (bigrams) for partial-phrase recall while queries
are split on whitespace only.

Normalizers are ``str -> str`` callables. Tokenizers are chainable
``Sequence[str] -> list[str]`` callables; the first stage receives the single
normalized string and every later stage transforms the previous output.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import re
from typing import Protocol
import unicodedata

from ascii_match.errors import AnalyzerConfigError


class Normalizer(Protocol):
    """Protocol implemented by normalizers."""

    def __call__(self, text: str) -> str:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, tokens: Sequence[str]) -> list[str]:  # pragma: no cover - interface definition
        ...


class Unaccent:
    """Strip diacritics: canonical decomposition, drop nonspacing marks, recompose.

    Compatibility forms such as ligatures and circled digits are left alone.
    """

    def __call__(self, text: str) -> str:
        decomposed = unicodedata.normalize("NFD", text)
        stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
        return unicodedata.normalize("NFC", stripped)


class LowerCase:
    """Lowercase the whole string."""

    def __call__(self, text: str) -> str:
        return text.lower()


class SpaceBetweenDigits:
    """Insert a space between letters and digits so ``abc123`` splits in two."""

    _BOUNDARY = re.compile(r"(?<=[^\W\d_])(?=\d)|(?<=\d)(?=[^\W\d_])")

    def __call__(self, text: str) -> str:
        return self._BOUNDARY.sub(" ", text)


class Custom:
    """Wrap an arbitrary user-supplied ``str -> str`` substitution."""

    def __init__(self, fn: Callable[[str], str]) -> None:
        if not callable(fn):
            raise AnalyzerConfigError("Custom normalizer requires a callable")
        self.fn = fn

    def __call__(self, text: str) -> str:
        return self.fn(text)


class RemoveNonAlphanumeric:
    """Drop everything except letters, decimal digits and whitespace.

    Whitespace runs (newlines and tabs included) collapse to one space.
    """

    def __call__(self, text: str) -> str:
        out: list[str] = []
        pending_space = False
        for ch in text:
            if ch.isalpha() or ch.isdecimal():
                if pending_space and out:
                    out.append(" ")
                pending_space = False
                out.append(ch)
            elif ch.isspace():
                pending_space = True
        if pending_space and out:
            out.append(" ")
        return "".join(out)


class Trim:
    """Strip the given characters from both ends."""

    def __init__(self, chars: str = " ") -> None:
        self.chars = chars

    def __call__(self, text: str) -> str:
        return text.strip(self.chars)


def replace_hash(text: str) -> str:
    return text.replace("#", " ")


def default_normalizers() -> list[Normalizer]:
    """Return the standard normalizer chain in its required order."""
    return [
        Unaccent(),
        LowerCase(),
        SpaceBetweenDigits(),
        Custom(replace_hash),
        RemoveNonAlphanumeric(),
        Trim(" "),
    ]


class NormalizerChain:
    """Apply normalizers in sequence."""

    def __init__(self, normalizers: Sequence[Normalizer] | None = None) -> None:
        self.normalizers = list(normalizers if normalizers is not None else default_normalizers())

    def __call__(self, text: str) -> str:
        for normalizer in self.normalizers:
            text = normalizer(text)
        return text


class WhitespaceTokenizer:
    """Split every incoming token on whitespace."""

    def __call__(self, tokens: Sequence[str]) -> list[str]:
        out: list[str] = []
        for token in tokens:
            out.extend(token.split())
        return out


class ShingleTokenizer:
    """Emit overlapping n-grams of ``width`` consecutive tokens.

    A sequence shorter than ``width`` produces one shingle made of the whole
    sequence; an empty sequence produces nothing. With ``keep_unigrams`` every
    window start also emits its own token ahead of the shingle.
    """

    def __init__(self, width: int = 2, *, separator: str = "", keep_unigrams: bool = False) -> None:
        if width < 1:
            msg = f"Shingle width must be >= 1, got {width}"
            raise AnalyzerConfigError(msg)
        self.width = width
        self.separator = separator
        self.keep_unigrams = keep_unigrams

    def __call__(self, tokens: Sequence[str]) -> list[str]:
        count = len(tokens)
        if count == 0:
            return []
        emit_unigrams = self.keep_unigrams and self.width > 1
        if count < self.width:
            shingle = self.separator.join(tokens)
            if not emit_unigrams:
                return [shingle]
            out = list(tokens)
            if count > 1:
                out.append(shingle)
            return out

        out = []
        for start in range(count - self.width + 1):
            if emit_unigrams:
                out.append(tokens[start])
            out.append(self.separator.join(tokens[start : start + self.width]))
        if emit_unigrams:
            # trailing tokens never start a full window
            out.extend(tokens[count - self.width + 1 :])
        return out


class UniqueTokenizer:
    """Drop repeated tokens, keeping first-occurrence order."""

    def __call__(self, tokens: Sequence[str]) -> list[str]:
        return list(dict.fromkeys(tokens))


class Analyzer:
    """Normalizer chain plus separate index-time and query-time tokenizer chains."""

    def __init__(
        self,
        normalizers: Sequence[Normalizer] | None = None,
        search_tokenizers: Sequence[Tokenizer] | None = None,
        index_tokenizers: Sequence[Tokenizer] | None = None,
    ) -> None:
        self.normalizer = NormalizerChain(normalizers)
        if search_tokenizers is None:
            search_tokenizers = [WhitespaceTokenizer(), UniqueTokenizer()]
        if index_tokenizers is None:
            index_tokenizers = [WhitespaceTokenizer()]
        self.search_tokenizers = list(search_tokenizers)
        self.index_tokenizers = list(index_tokenizers)

    def _run(self, tokenizers: Sequence[Tokenizer], text: str) -> list[str]:
        normalized = self.normalizer(text)
        if not normalized:
            return []
        tokens: list[str] = [normalized]
        for tokenizer in tokenizers:
            tokens = tokenizer(tokens)
        return [token for token in tokens if token]

    def analyze_index(self, text: str) -> list[str]:
        return self._run(self.index_tokenizers, text)

    def analyze_search(self, text: str) -> list[str]:
        return self._run(self.search_tokenizers, text)


class KeywordAnalyzer(Analyzer):
    """Analyzer that treats the entire normalized input as a single term."""

    def __init__(self) -> None:
        super().__init__(normalizers=[LowerCase(), Trim(" ")], search_tokenizers=[], index_tokenizers=[])


def create_shingles_analyzer(width: int = 2) -> Analyzer:
    """Shingled index side, whitespace + unique query side."""
    return Analyzer(
        default_normalizers(),
        search_tokenizers=[WhitespaceTokenizer(), UniqueTokenizer()],
        index_tokenizers=[WhitespaceTokenizer(), ShingleTokenizer(width, keep_unigrams=True)],
    )


def create_whitespace_analyzer() -> Analyzer:
    return Analyzer(
        default_normalizers(),
        search_tokenizers=[WhitespaceTokenizer(), UniqueTokenizer()],
        index_tokenizers=[WhitespaceTokenizer()],
    )


_ANALYZER_FACTORIES: dict[str, Callable[..., Analyzer]] = {
    "shingles": create_shingles_analyzer,
    "whitespace": lambda **_: create_whitespace_analyzer(),
    "keyword": lambda **_: KeywordAnalyzer(),
}


def get_analyzer(name: str | None, **options: int) -> Analyzer:
    """Return analyzer by name, defaulting to the shingles analyzer."""

    if name is None:
        return _ANALYZER_FACTORIES["shingles"](**options)
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise AnalyzerConfigError(msg)
    return _ANALYZER_FACTORIES[normalized](**options)
