from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple


class _Missing:
    """Sentinel para campo ausente (diferente de null explícito)."""

    def __repr__(self) -> str:
        return "undefined"

    __str__ = __repr__

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class Violation:
    """Uma checagem que falhou."""
    path: str
    message: str


def render_value(value: Any) -> str:
    """Valor como aparece nos logs do harness: null, true, 5 (não None, True, 5.0)."""
    if value is MISSING:
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def join_path(prefix: str, path: str) -> str:
    if not prefix:
        return path
    if not path:
        return prefix
    if path.startswith("["):
        return prefix + path
    return f"{prefix}.{path}"


def index_path(prefix: str, i: int) -> str:
    return f"{prefix}[{i}]"


def resolve_path(obj: Any, path: str) -> Any:
    """
    Resolve 'quotes[2].startIndex' dentro de obj.
    Qualquer passo inválido (tipo errado, chave/índice ausente) vira MISSING.
    """
    if not path:
        return obj
    cur = obj
    for key, idx in _SEGMENT_RE.findall(path):
        if key:
            if not isinstance(cur, dict) or key not in cur:
                return MISSING
            cur = cur[key]
        else:
            i = int(idx)
            if not isinstance(cur, list) or i >= len(cur):
                return MISSING
            cur = cur[i]
    return cur


def is_nonempty_str(x: Any) -> bool:
    return isinstance(x, str) and x.strip() != ""


def is_integer(x: Any) -> bool:
    """Inteiro no sentido JSON: 5 e 5.0 valem, True/False não."""
    if isinstance(x, bool):
        return False
    if isinstance(x, int):
        return True
    return isinstance(x, float) and x.is_integer()


def count_sentences(text: str, min_chars: int = 10) -> int:
    """Heurística: divide por pontuação e conta trechos com mais de min_chars."""
    return len([s for s in _SENTENCE_SPLIT_RE.split(text) if len(s.strip()) > min_chars])


class FieldValidator:
    """
    Predicado sobre um único valor.

    Subclasses implementam `validate(value, path)` (uma violação ou None) ou
    sobrescrevem `check(value, path)` quando produzem várias violações.
    Nunca levantam exceção por causa do tipo do valor.
    """

    default_message = "{path} is invalid"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message

    def violation(self, path: str, value: Any, template: Optional[str] = None, **fields: Any) -> Violation:
        fields = {k: render_value(v) if isinstance(v, (float, bool)) or v is None else v for k, v in fields.items()}
        text = (template or self.message).format(path=path, value=render_value(value), **fields)
        return Violation(path=path, message=text)

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        raise NotImplementedError

    def check(self, value: Any, path: str) -> List[Violation]:
        v = self.validate(value, path)
        return [v] if v is not None else []


class PresentString(FieldValidator):
    """Falha se o valor não for string não vazia (sem trim)."""

    default_message = "{path} is missing or not a string"

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if isinstance(value, str) and value:
            return None
        return self.violation(path, value)


class NonEmptyString(FieldValidator):
    default_message = "{path} is empty or missing"

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if is_nonempty_str(value):
            return None
        return self.violation(path, value)


class StringMinLength(FieldValidator):
    """
    Falha se len(value.strip()) < n.
    Não-strings e "" são ignoradas (outra regra cobre presença e tipo), exceto com
    require_string=True, quando também contam como falha.
    """

    default_message = "{path} is too short (less than {n} chars)"

    def __init__(self, n: int, message: Optional[str] = None, require_string: bool = False):
        super().__init__(message)
        self.n = n
        self.require_string = require_string

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if not isinstance(value, str) or not value:
            # string vazia já é "missing" para a regra de presença
            return self.violation(path, value, n=self.n) if self.require_string else None
        if len(value.strip()) < self.n:
            return self.violation(path, value, n=self.n)
        return None


class SentenceCount(FieldValidator):
    default_message = "{path} has {count} sentences (expected at least {minimum})"

    def __init__(self, minimum: int, min_chars: int = 10, message: Optional[str] = None):
        super().__init__(message)
        self.minimum = minimum
        self.min_chars = min_chars

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if not isinstance(value, str) or not value:
            return None
        count = count_sentences(value, self.min_chars)
        if count < self.minimum:
            return self.violation(path, value, count=count, minimum=self.minimum)
        return None


class Integer(FieldValidator):
    default_message = "{path} is not an integer"

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if is_integer(value):
            return None
        return self.violation(path, value)


class EnumMember(FieldValidator):
    default_message = '{path} "{value}" is not a valid enum value'

    def __init__(self, choices: Sequence[str], message: Optional[str] = None):
        super().__init__(message)
        self.choices: Tuple[str, ...] = tuple(choices)

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if isinstance(value, str) and value in self.choices:
            return None
        return self.violation(path, value, choices=", ".join(self.choices))


class OrderedPair(FieldValidator):
    """Sobre um objeto: falha se low e high forem inteiros e low > high."""

    default_message = "{path}.{low} ({lo}) > {high} ({hi})"

    def __init__(self, low: str, high: str, message: Optional[str] = None):
        super().__init__(message)
        self.low = low
        self.high = high

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        lo = resolve_path(value, self.low)
        hi = resolve_path(value, self.high)
        if is_integer(lo) and is_integer(hi) and lo > hi:
            return self.violation(path, value, low=self.low, high=self.high, lo=lo, hi=hi)
        return None


class ArrayOf(FieldValidator):
    """
    Lista cujos elementos passam por `rules` (Rule com path relativo ao elemento).
    Agrega todas as violações de todos os elementos, com path indexado.
    """

    default_message = "{path} is not an array"
    max_items_message = "{path} has {count} items (expected at most {max_items})"

    def __init__(self, rules: Sequence[Any] = (), max_items: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message)
        self.rules = tuple(rules)
        self.max_items = max_items

    def check(self, value: Any, path: str) -> List[Violation]:
        if not isinstance(value, list):
            return [self.violation(path, value)]

        out: List[Violation] = []
        if self.max_items is not None and len(value) > self.max_items:
            out.append(self.violation(path, value, self.max_items_message,
                                      count=len(value), max_items=self.max_items))

        for i, element in enumerate(value):
            base = index_path(path, i)
            for rule in self.rules:
                out.extend(rule.apply(element, base))
        return out


class CollectionSizeBounds(FieldValidator):
    """Conta só os itens válidos (por padrão, strings não vazias) e exige min <= n <= max."""

    default_message = "{path} is not an array"
    min_message = "{path} has {count} non-empty items (expected at least {minimum})"
    max_message = "{path} has {count} items (expected at most {maximum})"

    def __init__(
        self,
        minimum: int = 0,
        maximum: Optional[int] = None,
        item: Callable[[Any], bool] = is_nonempty_str,
        message: Optional[str] = None,
        min_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.minimum = minimum
        if min_message:
            self.min_message = min_message
        self.maximum = maximum
        self.item = item

    def check(self, value: Any, path: str) -> List[Violation]:
        if not isinstance(value, list):
            return [self.violation(path, value)]

        count = len([x for x in value if self.item(x)])
        out: List[Violation] = []
        if count < self.minimum:
            out.append(self.violation(path, value, self.min_message, count=count, minimum=self.minimum))
        if self.maximum is not None and count > self.maximum:
            out.append(self.violation(path, value, self.max_message, count=count, maximum=self.maximum))
        return out


class NonEmptyStringArray(FieldValidator):
    default_message = "{path} is not an array"
    empty_message = "{path} array is empty"
    invalid_message = "{path} has {count} empty/non-string items"

    def validate(self, value: Any, path: str) -> Optional[Violation]:
        if not isinstance(value, list):
            return self.violation(path, value)
        if not value:
            return self.violation(path, value, self.empty_message)
        invalid = [x for x in value if not is_nonempty_str(x)]
        if invalid:
            return self.violation(path, value, self.invalid_message, count=len(invalid))
        return None
