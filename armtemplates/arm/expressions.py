"""Helpers for reading ARM template expressions.

Only the small subset of the expression language that wires resources
together is understood here: ``parameters('x')`` lookups and the
``resourceId``/``reference``/``listKeys``/``concat`` forms used to point at
another resource. Everything else is treated as opaque text.
"""
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

PARAMETER_REFERENCE = re.compile(r"parameters\(\s*'([^']*)'\s*\)", re.IGNORECASE)

# Functions whose first argument identifies another resource
_LOOKUP_FUNCTIONS = ("reference", "listKeys")


@dataclass(frozen=True)
class ResourceId:
    """Normalized identity of a resource: lowercased type plus name segments.

    An empty type means the reference only named the resource, which ARM
    allows for resources declared in the same template.
    """
    type: str
    name: Tuple[str, ...]

    def __str__(self) -> str:
        return f"{self.type or '*'}/{'/'.join(self.name)}"


def is_expression(value: Any) -> bool:
    """True for strings ARM evaluates as an expression (``[...]``, not ``[[``)."""
    return (
        isinstance(value, str)
        and value.startswith("[")
        and value.endswith("]")
        and not value.startswith("[[")
    )


def iter_strings(value: Any) -> Iterator[str]:
    """Yield every string nested anywhere inside dicts and lists."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_strings(item)


def parameter_references(value: Any) -> List[str]:
    """Names of all parameters referenced by expressions inside ``value``."""
    names = []
    for text in iter_strings(value):
        if not is_expression(text):
            continue
        for name in PARAMETER_REFERENCE.findall(text):
            if name not in names:
                names.append(name)
    return names


def _closing_paren(text: str, start: int) -> Optional[int]:
    depth = 1
    quoted = False
    for index in range(start, len(text)):
        char = text[index]
        if char == "'":
            quoted = not quoted
        elif quoted:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def split_arguments(text: str) -> List[str]:
    """Split a function's argument list on top-level commas."""
    args = []
    depth = 0
    quoted = False
    current = []
    for char in text:
        if char == "'":
            quoted = not quoted
        elif not quoted:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            elif char == "," and depth == 0:
                args.append("".join(current).strip())
                current = []
                continue
        current.append(char)
    tail = "".join(current).strip()
    if tail or args:
        args.append(tail)
    return args


def find_calls(expression: str, function: str) -> List[str]:
    """Argument text of every call to ``function`` in ``expression``, nested ones included."""
    pattern = re.compile(r"(?<![\w.])" + re.escape(function) + r"\s*\(", re.IGNORECASE)
    calls = []
    for match in pattern.finditer(expression):
        end = _closing_paren(expression, match.end())
        if end is not None:
            calls.append(expression[match.end():end])
    return calls


def _call_arguments(text: str, function: str) -> Optional[List[str]]:
    """Arguments of ``text`` when the whole of it is a single call to ``function``."""
    text = text.strip()
    match = re.match(re.escape(function) + r"\s*\(", text, re.IGNORECASE)
    if not match:
        return None
    end = _closing_paren(text, match.end())
    if end != len(text) - 1:
        return None
    return split_arguments(text[match.end():end])


def _literal(arg: str) -> Optional[str]:
    arg = arg.strip()
    if len(arg) >= 2 and arg.startswith("'") and arg.endswith("'"):
        return arg[1:-1].replace("''", "'")
    return None


def _normalize_segment(text: str) -> str:
    return "".join(text.split()).lower()


def _quote(literal: str) -> str:
    return "'" + literal.replace("'", "''") + "'"


def _group_segments(args: List[str]) -> Tuple[str, ...]:
    """Group concat() arguments into name segments split on ``/`` inside literals."""
    segments = []
    current = []
    for arg in args:
        literal = _literal(arg)
        if literal is None or "/" not in literal:
            current.append(arg)
            continue
        head, *rest = literal.split("/")
        if head:
            current.append(_quote(head))
        for piece in rest:
            segments.append(",".join(current))
            current = [_quote(piece)] if piece else []
    segments.append(",".join(current))
    return tuple(_normalize_segment(segment) for segment in segments)


def name_segments(name: str) -> Tuple[str, ...]:
    """Normalized name segments of a resource's ``name`` field."""
    if is_expression(name):
        body = name[1:-1]
        args = _call_arguments(body, "concat")
        if args is not None and any("/" in (_literal(arg) or "") for arg in args):
            return _group_segments(args)
        return (_normalize_segment(body),)
    return tuple(_normalize_segment(_quote(part)) for part in name.split("/"))


def resource_id_for(resource_type: str, name: str) -> ResourceId:
    """Identity of a declared resource."""
    return ResourceId(resource_type.lower(), name_segments(name))


def _parse_literal_target(text: str) -> Optional[ResourceId]:
    # 'Namespace/type/name' or nested 'Namespace/type/name/child/childName'
    parts = text.split("/")
    if len(parts) >= 3 and len(parts) % 2 == 1 and "." in parts[0]:
        resource_type = "/".join([parts[0]] + parts[1::2])
        names = parts[2::2]
        return ResourceId(resource_type.lower(), tuple(_normalize_segment(_quote(n)) for n in names))
    if "/" not in text and text:
        return ResourceId("", (_normalize_segment(_quote(text)),))
    return None


def parse_reference(text: str) -> Optional[ResourceId]:
    """Parse one expression (without brackets) that points at a resource."""
    text = text.strip()
    args = _call_arguments(text, "resourceId")
    if args is not None:
        for index, arg in enumerate(args):
            literal = _literal(arg)
            if literal and "/" in literal:
                return ResourceId(
                    literal.lower(),
                    tuple(_normalize_segment(segment) for segment in args[index + 1:]),
                )
        return None

    args = _call_arguments(text, "concat")
    if args:
        prefix = _literal(args[0])
        if prefix and prefix.endswith("/") and "/" in prefix[:-1]:
            return ResourceId(prefix[:-1].lower(), _group_segments(args[1:]))
        return None

    literal = _literal(text)
    if literal is not None:
        return _parse_literal_target(literal)
    return None


def dependency_target(entry: str) -> Optional[ResourceId]:
    """Resource a ``dependsOn`` entry points at, or None if it cannot be parsed."""
    if is_expression(entry):
        return parse_reference(entry[1:-1])
    return _parse_literal_target(entry)


def referenced_resources(value: Any) -> List[ResourceId]:
    """Every resource that expressions inside ``value`` look up or point at."""
    found = []
    for text in iter_strings(value):
        if not is_expression(text):
            continue
        body = text[1:-1]
        candidates = [parse_reference(f"resourceId({args})") for args in find_calls(body, "resourceId")]
        for function in _LOOKUP_FUNCTIONS:
            for args in find_calls(body, function):
                arguments = split_arguments(args)
                if arguments and _call_arguments(arguments[0], "resourceId") is None:
                    candidates.append(parse_reference(arguments[0]))
        for resource_id in candidates:
            if resource_id is not None and resource_id not in found:
                found.append(resource_id)
    return found


def resolves(target: ResourceId, known) -> bool:
    """True when ``target`` names one of the ``known`` resource ids."""
    if target.type:
        return target in known
    return any(candidate.name == target.name for candidate in known)
