# services/generator_markov.py
import random
from typing import Iterable, Iterator, List, Optional, Tuple


def iter_pairs(text: str) -> Iterator[Tuple[str, str]]:
    """Yield consecutive (previous, next) word pairs of `text`.

    Words are runs of non-whitespace; "a b a c" gives (a, b), (b, a), (a, c).
    Less than two words gives nothing.
    """
    prev = None
    for word in (text or "").split():
        if prev is not None:
            yield prev, word
        prev = word


class MarkovGenerator:
    """First-order word chain.

    `model` maps a word to every word seen right after it. Duplicates are kept,
    so a follower seen k times is k times as likely to be picked.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.model: dict[str, List[str]] = {}
        self._rng = rng or random

    def train(self, text: str):
        for prev, nxt in iter_pairs(text):
            self.model.setdefault(prev, []).append(nxt)

    feed = train

    def generate(self, count: int) -> str:
        if count <= 0 or not self.model:
            return ""
        # старт равновероятно среди ключей, без учёта частоты
        word = self._rng.choice(list(self.model))
        words = [word]
        for _ in range(count - 1):
            choices = self.model.get(word)
            if not choices:
                break
            word = self._rng.choice(choices)
            words.append(word)
        return " ".join(words)

    def successors(self, word: str) -> List[str]:
        return list(self.model.get(word, ()))

    @property
    def transitions(self) -> int:
        return sum(len(v) for v in self.model.values())

    def __len__(self) -> int:
        return len(self.model)

    def dump(self) -> str:
        lines = []
        for k, v in self.model.items():
            lines.append(f"{k} -> [" + "".join(f"'{w}' " for w in v) + "]")
        return "\n".join(lines)


def render(text: str, max_chars: int) -> str:
    """Flatten line breaks and cut overly long output at a word boundary."""
    out = " ".join((text or "").splitlines())
    if max_chars > 0 and len(out) > max_chars:
        space = out.find(" ", max_chars)
        if space != -1:
            out = out[:space]
    return out


# helper: build generator from stored messages
def build_markov_from_texts(texts: Iterable[str], rng: Optional[random.Random] = None) -> MarkovGenerator:
    mg = MarkovGenerator(rng=rng)
    for t in texts:
        mg.train(t or "")
    return mg


def make_sentence(texts: Iterable[str], words: int, max_chars: int,
                  rng: Optional[random.Random] = None) -> str:
    return render(build_markov_from_texts(texts, rng=rng).generate(words), max_chars)
