"""Signature discovery for Python script targets.

The target's entrypoint function (``main`` by default) declares the
parameters the launcher binds. The declaration is read from the script's
source with :mod:`ast`; the script is never imported or executed here, so
a target with side effects at import time is still safe to inspect.

Architecture:

    .. code-block:: text

        def main(PrinterName: str, PrinterColor: str, ScriptName: str = "",
                 Tasks: str = "", PaperSize: str = "A4", *, verbose=False):
                 ──────────────────── positional ──────────────   ─ control ─

        positional parameters   → ParameterSignature, declaration order
        *args / **kwargs        → excluded
        keyword-only control    → excluded (supplied by the launcher)
        keyword-only, defaulted → excluded (target default applies)

    Annotation → TypeCategory:

        list, tuple, set, Sequence, …    → LIST
        dict, Mapping, OrderedDict, …    → MAP
        str, int, float, bool, Path, …   → SCALAR   (also: no annotation)
        Optional[X], X | None            → category of X
        any other class name             → STRUCT

Example:
    >>> provider = PythonScriptSignatureProvider()
    >>> signature = provider.inspect(Path("scripts/get_printers.py"))
    >>> signature.names
    ['PrinterName', 'PrinterColor', 'ScriptName', 'Tasks', 'PaperSize']

Tags:
    launchpad, signature, python, ast, introspection

Doc-Types:
    api-reference
"""

from __future__ import annotations

import ast
from pathlib import Path

from launchpad.core.errors import TargetNotExecutableShape, TargetNotFound
from launchpad.framework.logging import get_logger
from launchpad.signature.models import ParameterDescriptor, ParameterSignature, TypeCategory

logger = get_logger(__name__)

# Switches owned by the launcher, passed by keyword when a target declares them.
CONTROL_PARAMETERS: frozenset[str] = frozenset({"verbose", "debug"})

_LIST_NAMES = frozenset({
    "list", "List", "tuple", "Tuple", "set", "Set", "frozenset", "FrozenSet",
    "Sequence", "MutableSequence", "Iterable", "Collection", "deque",
})
_MAP_NAMES = frozenset({
    "dict", "Dict", "Mapping", "MutableMapping", "OrderedDict", "defaultdict", "Counter",
})
_SCALAR_NAMES = frozenset({
    "str", "int", "float", "bool", "bytes", "complex", "object", "Any",
    "Path", "PurePath", "date", "datetime", "time", "timedelta", "Decimal", "UUID",
    "Literal", "LiteralString", "None",
})

_UNRESOLVED = object()


class PythonScriptSignatureProvider:
    """Reads the entrypoint declaration of a ``.py`` target."""

    kind = "python"
    suffixes = (".py",)

    def __init__(self, entrypoint: str = "main") -> None:
        self.entrypoint = entrypoint

    def supports(self, path: Path) -> bool:
        return Path(path).suffix.lower() in self.suffixes

    def inspect(self, path: Path) -> ParameterSignature:
        path = Path(path)
        target = str(path)

        if not path.is_file():
            raise TargetNotFound(target)

        try:
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise TargetNotExecutableShape(target, "source is not UTF-8 text", cause=exc) from exc
        except OSError as exc:
            raise TargetNotFound(target, f"Target script cannot be read: {target} ({exc})") from exc

        try:
            tree = ast.parse(source, filename=target)
        except SyntaxError as exc:
            raise TargetNotExecutableShape(
                target, f"syntax error at line {exc.lineno}: {exc.msg}", cause=exc,
            ) from exc

        function = self._find_entrypoint(tree)
        if function is None:
            raise TargetNotExecutableShape(
                target, f"no top-level function named '{self.entrypoint}'",
            )

        descriptors = self._describe_parameters(target, function.args)
        logger.debug(
            "signature.inspected",
            target=target,
            entrypoint=self.entrypoint,
            parameters=[d.name for d in descriptors],
        )
        return ParameterSignature(target=target, parameters=tuple(descriptors), entrypoint=self.entrypoint)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_entrypoint(self, tree: ast.Module) -> ast.FunctionDef | ast.AsyncFunctionDef | None:
        found = None
        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == self.entrypoint:
                found = node  # a later definition wins, as at runtime
        return found

    def _describe_parameters(self, target: str, args: ast.arguments) -> list[ParameterDescriptor]:
        positional = [*args.posonlyargs, *args.args]
        first_defaulted = len(positional) - len(args.defaults)

        descriptors: list[ParameterDescriptor] = []
        for index, arg in enumerate(positional):
            if arg.arg in CONTROL_PARAMETERS:
                raise TargetNotExecutableShape(
                    target,
                    f"control parameter '{arg.arg}' must be declared keyword-only",
                )

            default_node = args.defaults[index - first_defaulted] if index >= first_defaulted else None
            descriptors.append(self._descriptor(arg, index, default_node))

        for arg, default_node in zip(args.kwonlyargs, args.kw_defaults):
            if arg.arg in CONTROL_PARAMETERS or default_node is not None:
                continue
            raise TargetNotExecutableShape(
                target,
                f"keyword-only parameter '{arg.arg}' has no default and cannot be bound positionally",
            )

        return descriptors

    def _descriptor(self, arg: ast.arg, position: int, default_node: ast.expr | None) -> ParameterDescriptor:
        annotation = ast.unparse(arg.annotation) if arg.annotation is not None else None

        if default_node is None:
            return ParameterDescriptor(
                name=arg.arg,
                type_category=categorize_annotation(arg.annotation),
                mandatory=True,
                position=position,
                annotation=annotation,
            )

        default = _literal_default(default_node)
        resolved = default is not _UNRESOLVED
        return ParameterDescriptor(
            name=arg.arg,
            type_category=categorize_annotation(arg.annotation),
            mandatory=False,
            declared_default=default if resolved else None,
            has_default=resolved,
            position=position,
            annotation=annotation,
        )


def _literal_default(node: ast.expr) -> object:
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return _UNRESOLVED


def categorize_annotation(node: ast.expr | None) -> TypeCategory:
    """Map an annotation expression to a :class:`TypeCategory`."""
    match node:
        case None:
            return TypeCategory.SCALAR
        case ast.Constant(value=str() as text):
            try:
                parsed = ast.parse(text, mode="eval").body
            except SyntaxError:
                return TypeCategory.SCALAR
            return categorize_annotation(parsed)
        case ast.Constant():
            return TypeCategory.SCALAR
        case ast.BinOp(op=ast.BitOr()):
            return _categorize_union(_flatten_union(node))
        case ast.Subscript(value=base, slice=inner):
            name = _base_name(base)
            if name == "Optional":
                return categorize_annotation(inner)
            if name == "Union":
                members = list(inner.elts) if isinstance(inner, ast.Tuple) else [inner]
                return _categorize_union(members)
            if name == "Annotated":
                first = inner.elts[0] if isinstance(inner, ast.Tuple) else inner
                return categorize_annotation(first)
            return _categorize_name(name)
        case ast.Name() | ast.Attribute():
            return _categorize_name(_base_name(node))
        case _:
            return TypeCategory.SCALAR


def _flatten_union(node: ast.expr) -> list[ast.expr]:
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return [*_flatten_union(node.left), *_flatten_union(node.right)]
    return [node]


def _categorize_union(members: list[ast.expr]) -> TypeCategory:
    concrete = [m for m in members if not (isinstance(m, ast.Constant) and m.value is None)]
    concrete = [m for m in concrete if _base_name(m) != "None"]
    if len(concrete) == 1:
        return categorize_annotation(concrete[0])
    return TypeCategory.SCALAR


def _base_name(node: ast.expr) -> str:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return ""


def _categorize_name(name: str) -> TypeCategory:
    if name in _LIST_NAMES:
        return TypeCategory.LIST
    if name in _MAP_NAMES:
        return TypeCategory.MAP
    if not name or name in _SCALAR_NAMES:
        return TypeCategory.SCALAR
    return TypeCategory.STRUCT
