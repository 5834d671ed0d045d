"""Restricted evaluator for project files.

Project files use Python expression syntax but are never executed by the
interpreter. The source is parsed with ``ast`` and walked by a small
whitelist evaluator. Anything not listed here is rejected:

Statements
    ``name = <expr>`` (plain or tuple-unpacking assignment), docstrings, and
    one final expression statement whose value is the result.

Expressions
    literals, dicts (including ``**`` spreads), lists, tuples, names,
    arithmetic (``+ - * / // %``), unary ``- + not``, ``and``/``or``,
    comparisons, conditional expressions, subscripts and slices, f-strings,
    list/dict comprehensions, and calls to functions provided by the
    environment.

There is no attribute access, no import, and no way to define functions, so
the environment decides everything a project file can reach.
"""

import ast
import operator
import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from diligent.exceptions import CompileError

MAX_RANGE = 10_000
MAX_SEQUENCE = 100_000
MAX_FORMAT_WIDTH = 1_000

_FORMAT_NUMBER = re.compile(r"\d+")

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPS = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: operator.not_,
}

_COMPARE_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}


def _bounded_range(*args: int) -> range:
    r = range(*args)
    if len(r) > MAX_RANGE:
        raise ValueError(f"range() is limited to {MAX_RANGE} items")
    return r


SAFE_BUILTINS: Dict[str, Callable] = {
    'abs': abs,
    'bool': bool,
    'dict': dict,
    'enumerate': enumerate,
    'float': float,
    'int': int,
    'len': len,
    'list': list,
    'max': max,
    'min': min,
    'range': _bounded_range,
    'round': round,
    'sorted': sorted,
    'str': str,
    'sum': sum,
    'tuple': tuple,
    'zip': zip,
}

CONSTANTS = {'true': True, 'false': False, 'nil': None}


class _ExecutionError(Exception):
    """Evaluation failure tied to a source node."""

    def __init__(self, node: ast.AST, message: str):
        super().__init__(message)
        self.lineno = getattr(node, 'lineno', None)


class Evaluator:
    """Walks a parsed project file and computes its result value."""

    def __init__(self, functions: Optional[Mapping[str, Callable]] = None, origin: str = '<project>'):
        self.functions: Dict[str, Callable] = {**SAFE_BUILTINS, **(functions or {})}
        self.origin = origin

    def evaluate(self, source: str) -> Any:
        """
        Evaluate project source and return the value of its final expression.

        Returns None if the file ends without an expression.

        Raises:
            CompileError: Syntax error, disallowed construct, or runtime failure
        """
        try:
            tree = ast.parse(source, filename=self.origin, mode='exec')
        except SyntaxError as e:
            raise CompileError(f"syntax error: {self.origin}, line {e.lineno}: {e.msg}")

        scope: Dict[str, Any] = dict(CONSTANTS)
        result = None
        try:
            for position, stmt in enumerate(tree.body):
                is_last = position == len(tree.body) - 1
                result = self._exec_statement(stmt, scope, is_last)
        except _ExecutionError as e:
            location = f"{self.origin}, line {e.lineno}" if e.lineno else self.origin
            raise CompileError(f"execution error: {location}: {e}")
        return result

    # -- statements ------------------------------------------------------

    def _exec_statement(self, stmt: ast.stmt, scope: Dict[str, Any], is_last: bool) -> Any:
        if isinstance(stmt, ast.Assign):
            value = self._eval(stmt.value, scope)
            for target in stmt.targets:
                self._bind(target, value, scope)
            return None

        if isinstance(stmt, ast.Expr):
            if is_last:
                return self._eval(stmt.value, scope)
            if isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str):
                return None
            raise _ExecutionError(stmt, "only the last expression in a project file may stand alone")

        raise _ExecutionError(stmt, f"{type(stmt).__name__} statements are not allowed")

    def _bind(self, target: ast.expr, value: Any, scope: Dict[str, Any]) -> None:
        if isinstance(target, ast.Name):
            if target.id in self.functions:
                raise _ExecutionError(target, f"cannot assign to built-in name '{target.id}'")
            scope[target.id] = value
            return

        if isinstance(target, (ast.Tuple, ast.List)):
            try:
                values = list(value)
            except TypeError:
                raise _ExecutionError(target, f"cannot unpack {type(value).__name__}")
            if len(values) != len(target.elts):
                raise _ExecutionError(
                    target, f"expected {len(target.elts)} values to unpack, got {len(values)}"
                )
            for element, item in zip(target.elts, values):
                self._bind(element, item, scope)
            return

        raise _ExecutionError(target, "can only assign to plain names")

    # -- expressions -----------------------------------------------------

    def _eval(self, node: ast.AST, scope: Dict[str, Any]) -> Any:
        handler = getattr(self, f'_eval_{type(node).__name__}', None)
        if handler is None:
            if isinstance(node, ast.Attribute):
                raise _ExecutionError(node, "attribute access is not allowed")
            raise _ExecutionError(node, f"{type(node).__name__} expressions are not allowed")
        try:
            return handler(node, scope)
        except _ExecutionError:
            raise
        except Exception as e:
            raise _ExecutionError(node, f"{type(e).__name__}: {e}")

    def _eval_Constant(self, node: ast.Constant, scope):
        return node.value

    def _eval_Name(self, node: ast.Name, scope):
        if node.id in scope:
            return scope[node.id]
        if node.id in self.functions:
            return self.functions[node.id]
        raise _ExecutionError(node, f"name '{node.id}' is not defined")

    def _eval_Dict(self, node: ast.Dict, scope):
        result = {}
        for key, value in zip(node.keys, node.values):
            if key is None:
                spread = self._eval(value, scope)
                if not isinstance(spread, Mapping):
                    raise _ExecutionError(value, "can only spread a dict with **")
                result.update(spread)
            else:
                result[self._eval(key, scope)] = self._eval(value, scope)
        return result

    def _eval_List(self, node: ast.List, scope):
        return [self._eval(element, scope) for element in node.elts]

    def _eval_Tuple(self, node: ast.Tuple, scope):
        return tuple(self._eval(element, scope) for element in node.elts)

    def _eval_BinOp(self, node: ast.BinOp, scope):
        op = _BIN_OPS.get(type(node.op))
        if op is None:
            raise _ExecutionError(node, f"operator {type(node.op).__name__} is not allowed")
        left = self._eval(node.left, scope)
        right = self._eval(node.right, scope)
        if isinstance(node.op, ast.Mult):
            for seq, count in ((left, right), (right, left)):
                if isinstance(seq, (str, list, tuple)) and isinstance(count, int):
                    if len(seq) * count > MAX_SEQUENCE:
                        raise _ExecutionError(node, "sequence repetition is too large")
        if isinstance(node.op, ast.Mod) and isinstance(left, str):
            raise _ExecutionError(node, "%-formatting is not allowed; use f-strings")
        return op(left, right)

    def _eval_UnaryOp(self, node: ast.UnaryOp, scope):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise _ExecutionError(node, f"operator {type(node.op).__name__} is not allowed")
        return op(self._eval(node.operand, scope))

    def _eval_BoolOp(self, node: ast.BoolOp, scope):
        is_and = isinstance(node.op, ast.And)
        value = None
        for operand in node.values:
            value = self._eval(operand, scope)
            if is_and and not value:
                return value
            if not is_and and value:
                return value
        return value

    def _eval_Compare(self, node: ast.Compare, scope):
        left = self._eval(node.left, scope)
        for op_node, comparator in zip(node.ops, node.comparators):
            right = self._eval(comparator, scope)
            if not _COMPARE_OPS[type(op_node)](left, right):
                return False
            left = right
        return True

    def _eval_IfExp(self, node: ast.IfExp, scope):
        if self._eval(node.test, scope):
            return self._eval(node.body, scope)
        return self._eval(node.orelse, scope)

    def _eval_Subscript(self, node: ast.Subscript, scope):
        value = self._eval(node.value, scope)
        return value[self._eval(node.slice, scope)]

    def _eval_Slice(self, node: ast.Slice, scope):
        def part(expr):
            return None if expr is None else self._eval(expr, scope)

        return slice(part(node.lower), part(node.upper), part(node.step))

    def _eval_JoinedStr(self, node: ast.JoinedStr, scope):
        return ''.join(str(self._eval(value, scope)) for value in node.values)

    def _eval_FormattedValue(self, node: ast.FormattedValue, scope):
        value = self._eval(node.value, scope)
        if node.conversion == ord('r'):
            value = repr(value)
        elif node.conversion == ord('s'):
            value = str(value)
        elif node.conversion == ord('a'):
            value = ascii(value)
        spec = self._eval(node.format_spec, scope) if node.format_spec is not None else ''
        if any(int(n) > MAX_FORMAT_WIDTH for n in _FORMAT_NUMBER.findall(spec)):
            raise _ExecutionError(node, f"format width is limited to {MAX_FORMAT_WIDTH}")
        return format(value, spec)

    def _eval_Call(self, node: ast.Call, scope):
        if not isinstance(node.func, ast.Name) or node.func.id not in self.functions:
            if isinstance(node.func, ast.Name) and node.func.id in scope:
                raise _ExecutionError(node, f"'{node.func.id}' is not callable")
            raise _ExecutionError(node, "only built-in and helper functions can be called")

        args = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                args.extend(self._eval(arg.value, scope))
            else:
                args.append(self._eval(arg, scope))

        kwargs = {}
        for keyword in node.keywords:
            value = self._eval(keyword.value, scope)
            if keyword.arg is None:
                if not isinstance(value, Mapping):
                    raise _ExecutionError(keyword, "can only spread a dict with **")
                kwargs.update(value)
            else:
                kwargs[keyword.arg] = value

        result = self.functions[node.func.id](*args, **kwargs)
        # Materialize lazy builtins so results are plain data
        if isinstance(result, (enumerate, zip)):
            result = list(result)
        return result

    def _iterate(self, generators: Iterable[ast.comprehension], scope) -> Iterable[Dict[str, Any]]:
        generators = list(generators)
        if not generators:
            yield scope
            return

        first, rest = generators[0], generators[1:]
        if first.is_async:
            raise _ExecutionError(first.target, "async comprehensions are not allowed")
        for item in self._eval(first.iter, scope):
            inner = dict(scope)
            self._bind(first.target, item, inner)
            if all(self._eval(condition, inner) for condition in first.ifs):
                yield from self._iterate(rest, inner)

    def _eval_ListComp(self, node: ast.ListComp, scope):
        return [self._eval(node.elt, inner) for inner in self._iterate(node.generators, scope)]

    def _eval_DictComp(self, node: ast.DictComp, scope):
        return {
            self._eval(node.key, inner): self._eval(node.value, inner)
            for inner in self._iterate(node.generators, scope)
        }


def evaluate(source: str, functions: Optional[Mapping[str, Callable]] = None, origin: str = '<project>') -> Any:
    return Evaluator(functions, origin).evaluate(source)
