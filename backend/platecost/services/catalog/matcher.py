"""
Free-text ingredient name -> catalog key.

Strategies run in a fixed order and the first hit wins:
  exact -> alias/derivative rules -> word-boundary substring -> reverse containment.
Pure and deterministic: works over any mapping keyed by lower-case names.
"""

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Callable, Mapping, Optional

from platecost.services.costing.models import MatchReason

MAX_KEY_LEN = 100

# Words that describe preparation or size, never the ingredient itself
_DESCRIPTORS = frozenset({
    "fresh", "freshly", "chopped", "diced", "minced", "sliced", "grated", "shredded",
    "crushed", "ground", "large", "medium", "small", "whole", "raw", "cooked", "dried",
    "frozen", "organic", "boneless", "skinless", "peeled", "finely", "roughly",
    "thinly", "lightly", "packed", "softened", "melted", "cold", "warm", "hot",
    "extra", "about", "of", "a", "an", "the", "and", "or", "to", "for",
})


@dataclass(frozen=True)
class CatalogMatch:
    key: str
    reason: MatchReason
    price_factor: float = 1.0


@dataclass(frozen=True)
class AliasRule:
    """If any trigger applies to the name, take the first target key present in the catalog."""

    triggers: tuple[str, ...]
    targets: tuple[tuple[str, float], ...]
    exact_triggers: tuple[str, ...] = ()

    def applies(self, name: str) -> bool:
        if name in self.exact_triggers:
            return True
        return any(self._ends_with_trigger(name, t) for t in self.triggers)

    def _ends_with_trigger(self, name: str, trigger: str) -> bool:
        # Only descriptors or words of the rule's own targets may follow the trigger
        allowed = _DESCRIPTORS.union(*(_words(key) for key, _ in self.targets))
        pattern = r"(?<![a-z0-9])" + re.escape(trigger) + r"(?:e?s)?(?![a-z0-9])"
        for m in re.finditer(pattern, name):
            if all(w in allowed for w in _words(name[m.end():])):
                return True
        return False


def _rule(triggers, targets, exact=()) -> AliasRule:
    return AliasRule(tuple(triggers), tuple(targets), tuple(exact))


ALIAS_RULES: tuple[AliasRule, ...] = (
    # Eggs: a yolk or white costs half the basis of a whole egg
    _rule(["egg yolk"], [("egg yolk", 1.0), ("egg", 0.5)], exact=["yolk", "yolks"]),
    _rule(["egg white"], [("egg white", 1.0), ("egg", 0.5)], exact=["white", "whites"]),
    _rule(["large egg"], [("large egg", 1.0), ("egg", 1.0)]),
    # Citrus juice: people buy the whole fruit
    _rule(["lemon juice"], [("lemon juice", 1.0), ("lemon", 1.0)]),
    _rule(["lime juice"], [("lime juice", 1.0), ("lime", 1.0)]),
    _rule(["orange juice"], [("orange juice", 1.0), ("orange", 1.0)]),
    # Garlic
    _rule(["garlic clove", "clove of garlic", "cloves of garlic"], [("garlic clove", 1.0), ("garlic", 1.0)]),
    _rule(["minced garlic", "garlic minced"], [("minced garlic", 1.0), ("garlic", 1.0)]),
    _rule(["fresh garlic"], [("fresh garlic", 1.0), ("garlic", 1.0)]),
    # Peppers
    _rule(["red bell pepper"], [("red bell pepper", 1.0), ("bell pepper", 1.0)], exact=["red pepper"]),
    _rule(["green bell pepper"], [("green bell pepper", 1.0), ("bell pepper", 1.0)], exact=["green pepper"]),
    _rule(["bell pepper", "sweet pepper"], [("bell pepper", 1.0)]),
    # Onions
    _rule(["yellow onion", "spanish onion"], [("yellow onion", 1.0), ("onion", 1.0)]),
    _rule(["red onion", "purple onion"], [("red onion", 1.0), ("onion", 1.0)]),
    _rule(["white onion"], [("white onion", 1.0), ("onion", 1.0)]),
    # Tomatoes
    _rule(["roma tomato", "plum tomato"], [("roma tomato", 1.0), ("tomato", 1.0)]),
    _rule(["cherry tomato", "grape tomato"], [("cherry tomatoes", 1.0), ("tomato", 1.0)]),
    _rule(["heirloom tomato"], [("heirloom tomatoes", 1.0), ("tomato", 1.0)]),
    # Cheeses
    _rule(["parmesan", "parmigiano"], [("parmesan cheese", 1.0), ("cheese", 1.0)]),
    _rule(["mozzarella"], [("mozzarella cheese", 1.0), ("cheese", 1.0)]),
    _rule(["cheddar"], [("cheddar cheese", 1.0), ("cheese", 1.0)]),
    # Herbs
    _rule(["fresh basil"], [("fresh basil", 1.0), ("basil", 1.0)], exact=["basil leaves"]),
    _rule(["fresh parsley"], [("fresh parsley", 1.0), ("parsley", 1.0)], exact=["parsley leaves"]),
    _rule(["fresh cilantro"], [("fresh cilantro", 1.0), ("cilantro", 1.0)], exact=["cilantro leaves"]),
    # Oils
    _rule(["extra virgin olive oil", "evoo"], [("olive oil extra virgin", 1.0), ("extra virgin olive oil", 1.0), ("olive oil", 1.0)]),
    _rule(["olive oil"], [("olive oil", 1.0)]),
    _rule(["vegetable oil", "canola oil"], [("vegetable oil", 1.0), ("oil", 1.0)]),
    # Proteins
    _rule(["chicken breast", "boneless chicken"], [("chicken breast", 1.0), ("chicken", 1.0)]),
    _rule(["ground beef"], [("ground beef", 1.0), ("beef", 1.0)]),
    _rule(["ground turkey"], [("ground turkey", 1.0), ("turkey", 1.0)]),
    # Rice
    _rule(["white rice", "long grain rice"], [("white rice", 1.0), ("rice", 1.0)]),
    _rule(["brown rice"], [("brown rice", 1.0), ("rice", 1.0)]),
    _rule(["basmati rice"], [("basmati rice", 1.0), ("rice", 1.0)]),
    # Milk
    _rule(["whole milk", "2% milk", "skim milk"], [("milk", 1.0)]),
)


def normalize_key(name: str) -> str:
    """Lower-case, commas to spaces, whitespace collapsed, truncated."""
    s = (name or "").lower().replace(",", " ")
    return " ".join(s.split())[:MAX_KEY_LEN]


def _words(text: str) -> list[str]:
    return re.findall(r"[a-z0-9%ñé'-]+", text.lower())


def _first_significant_word(name: str) -> Optional[str]:
    for w in _words(name):
        if w not in _DESCRIPTORS and not w.replace(".", "").isdigit():
            return w
    return None


def _contains_on_word_boundary(haystack: str, needle: str) -> bool:
    # Plural suffix on the name side still counts: "eggs" contains "egg"
    pattern = r"(?<![a-z0-9])" + re.escape(needle) + r"(?:e?s)?(?![a-z0-9])"
    return re.search(pattern, haystack) is not None


def _exact(name: str, catalog: Mapping[str, object]) -> Optional[CatalogMatch]:
    if name in catalog:
        return CatalogMatch(name, MatchReason.EXACT)
    return None


def _alias(name: str, catalog: Mapping[str, object]) -> Optional[CatalogMatch]:
    for rule in ALIAS_RULES:
        if not rule.applies(name):
            continue
        for key, factor in rule.targets:
            if key in catalog:
                return CatalogMatch(key, MatchReason.ALIAS, factor)
    return None


def _substring(name: str, catalog: Mapping[str, object]) -> Optional[CatalogMatch]:
    # Longest key wins so "olive oil" beats "oil"; ties break alphabetically
    hits = [k for k in catalog if k and _contains_on_word_boundary(name, k)]
    if not hits:
        return None
    best = sorted(hits, key=lambda k: (-len(k), k))[0]
    return CatalogMatch(best, MatchReason.SUBSTRING)


def _reverse_containment(name: str, catalog: Mapping[str, object]) -> Optional[CatalogMatch]:
    word = _first_significant_word(name)
    if not word:
        return None
    forms = {word}
    if word.endswith("s") and len(word) > 3:
        forms.update({word[:-1], word[:-2] if word.endswith("es") else word[:-1]})
    hits = [k for k in catalog if forms & set(_words(k))]
    if not hits:
        return None
    best = sorted(hits, key=lambda k: (len(k), k))[0]
    return CatalogMatch(best, MatchReason.SUBSTRING)


MATCH_STRATEGIES: tuple[Callable[[str, Mapping[str, object]], Optional[CatalogMatch]], ...] = (
    _exact,
    _alias,
    _substring,
    _reverse_containment,
)


def match(name: str, catalog: Mapping[str, object]) -> Optional[CatalogMatch]:
    """Resolve an ingredient name to a catalog key. None is a valid outcome."""
    key = normalize_key(name)
    if not key or not catalog:
        return None
    for strategy in MATCH_STRATEGIES:
        hit = strategy(key, catalog)
        if hit is not None:
            return hit
    return None


def text_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]: max of token-set Jaccard and difflib ratio."""
    a_norm, b_norm = normalize_key(a), normalize_key(b)
    if not a_norm or not b_norm:
        return 0.0
    if a_norm == b_norm:
        return 1.0
    a_tokens, b_tokens = set(_words(a_norm)), set(_words(b_norm))
    jaccard = 0.0
    if a_tokens and b_tokens:
        jaccard = len(a_tokens & b_tokens) / len(a_tokens | b_tokens)
    ratio = SequenceMatcher(None, a_norm, b_norm).ratio()
    return max(jaccard, ratio)
