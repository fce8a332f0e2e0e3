"""
Evaluator

Tree-walking evaluation of xylo expressions without using the Python call
stack for recursion.

Each AST node is evaluated by a step: either a ready value, an `Apply`
request, or a generator that yields sub-steps and receives their values:

    def _binary(self, node, env):
        left = yield self._eval(node.left, env)
        right = yield self._eval(node.right, env)
        return BINARY_OPERATIONS[node.operator](left, right)

`_run` drives the steps with an explicit stack, so program recursion depth
is bounded only by `max_depth` and memory. Evaluation is strict and left to
right; only the untaken branch of an `if` is skipped.
"""

import difflib
import logging
from typing import Any, Dict, Generator, Iterable, List, Mapping, Optional, Tuple, Union

from ..builtins import BINARY_OPERATIONS, BUILTINS, UNARY_OPERATIONS, Apply, BuiltinContext
from ..geometry import Color, Shape, primitive
from ..shared.errors import (
    ArityMismatch, RecursionLimitExceeded, TypeMismatch, UndefinedName, XyloRuntimeError,
)
from ..shared.nodes import (
    BinaryExpression, Call, ColorLiteral, Expression, ForExpression, Identifier, IfExpression,
    LetExpression, ListLiteral, Literal, LoopExpression, Program, ShapeLiteral, UnaryExpression,
)
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_CANVAS_SIZE, DEFAULT_MAX_DEPTH, DEFAULT_SEED, ENTRY_POINT_NAME
from .determinism import Noise, Random, Seed
from .environment import EMPTY_ENVIRONMENT, MISSING, Environment
from .values import Alternative, BuiltinFunction, Closure, Function, Value, is_function, type_name

logger = logging.getLogger("xylo.runtime.evaluator")


class _Ready:
    """A step whose value is already known."""
    __slots__ = ('value',)

    def __init__(self, value: Value):
        self.value = value


Step = Union[_Ready, Apply, Generator[Any, Value, Value]]
# (name, call site, counts toward the depth ceiling)
Frame = Optional[Tuple[str, Optional[SourceLocation], bool]]


def _locate(error: XyloRuntimeError, location: Optional[SourceLocation]) -> XyloRuntimeError:
    if error.location is None:
        error.location = location
    return error


class Evaluator:
    """
    Evaluates expressions against one program and one seed.

    Not reentrant: one evaluation runs at a time. Create one evaluator per
    run; the random stream continues across calls on the same instance.
    """

    def __init__(self,
                 program: Optional[Program] = None,
                 seed: Seed = DEFAULT_SEED,
                 width: int = DEFAULT_CANVAS_SIZE,
                 height: int = DEFAULT_CANVAS_SIZE,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.program = program
        self.source = program.source if program is not None else None
        self.max_depth = max_depth
        self.context = BuiltinContext(Random(seed), Noise(seed), width, height)
        self._globals: Dict[str, Closure] = {}
        self._dispatch = {
            Literal: self._literal,
            ColorLiteral: self._color_literal,
            ShapeLiteral: self._shape_literal,
            ListLiteral: self._list_literal,
            Identifier: self._identifier,
            Call: self._call,
            BinaryExpression: self._binary,
            UnaryExpression: self._unary,
            IfExpression: self._if,
            ForExpression: self._for,
            LoopExpression: self._loop,
            LetExpression: self._let,
        }
        # statistics of the last run
        self.calls = 0
        self.depth = 0
        self.deepest = 0

    @property
    def random(self) -> Random:
        return self.context.random

    # =========================================================================
    # Entry points
    # =========================================================================

    def evaluate(self, expr: Expression, env: Union[Environment, Mapping[str, Value], None] = None) -> Value:
        """Evaluate `expr` in `env` (an Environment or a plain name -> value mapping)."""
        if env is None:
            env = EMPTY_ENVIRONMENT
        elif not isinstance(env, Environment):
            env = Environment(env)
        return self._run(self._step(expr, env))

    def call(self, name: str, arguments: Iterable[Value] = ()) -> Value:
        """Call a definition or builtin by name."""
        function = self._resolve(name, None, EMPTY_ENVIRONMENT)
        return self._run(Apply(function, tuple(arguments), None, name))

    def evaluate_root(self) -> Shape:
        """Evaluate the program's `root` definition, which must produce a Shape."""
        definitions = self.program.lookup(ENTRY_POINT_NAME) if self.program is not None else None
        if not definitions:
            raise UndefinedName(ENTRY_POINT_NAME, source_code=self.source,
                                help=f"add an entry point: `{ENTRY_POINT_NAME} = ...`")
        entry = definitions[0]
        if entry.parameters:
            raise TypeMismatch(f"`{ENTRY_POINT_NAME}` must not take parameters", entry.location,
                               source_code=self.source, label="parameters declared here")
        value = self._run(Apply(self._global(ENTRY_POINT_NAME), (), entry.location, ENTRY_POINT_NAME))
        if not isinstance(value, Shape):
            raise TypeMismatch(f"`{ENTRY_POINT_NAME}` must evaluate to a Shape, found {type_name(value)}",
                               entry.location, source_code=self.source)
        return value

    # =========================================================================
    # Trampoline
    # =========================================================================

    def _run(self, step: Step) -> Value:
        self.calls = self.depth = self.deepest = 0
        draws = self.random.draws
        stack: List[Generator[Any, Value, Value]] = []
        frames: List[Frame] = []
        value: Value = None
        request: Step = step

        while True:
            # resolve the pending request into a value or a new stack entry
            if request is not None:
                try:
                    if isinstance(request, _Ready):
                        value = request.value
                    elif isinstance(request, Apply):
                        pushed, frame, value = self._apply(request)
                        if pushed is not None:
                            stack.append(pushed)
                            frames.append(frame)
                            value = None
                    else:
                        stack.append(request)
                        frames.append(None)
                        value = None
                except XyloRuntimeError as error:
                    self._annotate(error, frames)
                    raise
                request = None
            if not stack:
                break

            try:
                request = stack[-1].send(value)
            except StopIteration as done:
                stack.pop()
                frame = frames.pop()
                if frame is not None and frame[2]:
                    self.depth -= 1
                value = done.value
            except XyloRuntimeError as error:
                self._annotate(error, frames)
                raise

        logger.debug("evaluated: %d calls, max depth %d, %d random draws",
                     self.calls, self.deepest, self.random.draws - draws)
        return value

    def _apply(self, request: Apply) -> Tuple[Optional[Generator], Frame, Value]:
        """Start a call. Returns (generator to push, frame, immediate value)."""
        function, arguments = request.function, request.arguments
        name = request.name or getattr(function, "name", None) or type_name(function)

        if isinstance(function, Closure):
            if len(arguments) != function.arity:
                raise ArityMismatch(name, function.arity, len(arguments), request.location)
            if self.depth >= self.max_depth:
                raise RecursionLimitExceeded(self.max_depth, request.location)
            alternatives = function.alternatives
            if len(alternatives) == 1:
                chosen = alternatives[0]
            else:
                chosen = alternatives[self.random.weighted_index([a.weight for a in alternatives])]
            scope = (function.env or EMPTY_ENVIRONMENT).extend(zip(function.parameters, arguments))
            self.calls += 1
            self.depth += 1
            self.deepest = max(self.deepest, self.depth)
            return self._step(chosen.body, scope), (function.name, request.location, True), None

        if isinstance(function, BuiltinFunction):
            if len(arguments) != function.arity:
                raise ArityMismatch(name, function.arity, len(arguments), request.location)
            prefix = (self.context,) if function.needs_context else ()
            try:
                result = function.function(*prefix, *arguments)
            except XyloRuntimeError as error:
                raise error.with_context(function.name, request.location)
            if function.lazy:
                return result, (function.name, request.location, False), None
            return None, None, result

        raise TypeMismatch(f"`{name}` is not a function, found {type_name(function)}", request.location)

    def _annotate(self, error: XyloRuntimeError, frames: List[Frame]) -> None:
        for frame in reversed(frames):
            if frame is not None:
                error.with_context(frame[0], frame[1], self.source)
                break
        if error.source_code is None:
            error.source_code = self.source

    def _step(self, expr: Expression, env: Environment) -> Generator:
        """Wrap a body so a call always occupies its own stack entry."""
        return (yield self._eval(expr, env))

    # =========================================================================
    # Name resolution
    # =========================================================================

    def _global(self, name: str) -> Optional[Closure]:
        closure = self._globals.get(name)
        if closure is None and self.program is not None:
            definitions = self.program.lookup(name)
            if definitions:
                closure = Closure(
                    name,
                    tuple(definitions[0].parameters),
                    tuple(Alternative(d.body, d.weight) for d in definitions),
                )
                self._globals[name] = closure
        return closure

    def _resolve(self, name: str, location: Optional[SourceLocation], env: Environment) -> Function:
        """Program definitions first, then builtins."""
        function = self._global(name)
        if function is not None:
            return function
        builtin = BUILTINS.get(name)
        if builtin is not None:
            return builtin
        candidates = set(env.names()) | set(BUILTINS)
        if self.program is not None:
            candidates |= set(self.program.table)
        close = difflib.get_close_matches(name, sorted(candidates), n=1)
        help_text = f"a name with a similar spelling exists: `{close[0]}`" if close else None
        raise UndefinedName(name, location, help=help_text)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _eval(self, expr: Expression, env: Environment) -> Step:
        return self._dispatch[type(expr)](expr, env)

    def _literal(self, node: Literal, env: Environment) -> Step:
        return _Ready(node.value)

    def _color_literal(self, node: ColorLiteral, env: Environment) -> Step:
        return _Ready(Color.from_bytes(node.red, node.green, node.blue, node.alpha))

    def _shape_literal(self, node: ShapeLiteral, env: Environment) -> Step:
        return _Ready(primitive(node.kind))

    def _list_literal(self, node: ListLiteral, env: Environment):
        elements = []
        for element in node.elements:
            elements.append((yield self._eval(element, env)))
        return tuple(elements)

    def _identifier(self, node: Identifier, env: Environment) -> Step:
        value = env.get(node.name)
        if value is not MISSING:
            return _Ready(value)
        function = self._resolve(node.name, node.location, env)
        if function.arity == 0:
            return Apply(function, (), node.location, node.name)
        return _Ready(function)

    def _call(self, node: Call, env: Environment):
        function = env.get(node.name)
        if function is MISSING:
            function = self._resolve(node.name, node.location, env)
        elif not is_function(function):
            raise TypeMismatch(f"`{node.name}` is a {type_name(function)}, not a function",
                               node.location, label="called here")
        arguments = []
        for argument in node.arguments:
            arguments.append((yield self._eval(argument, env)))
        return (yield Apply(function, tuple(arguments), node.location, node.name))

    def _binary(self, node: BinaryExpression, env: Environment):
        left = yield self._eval(node.left, env)
        right = yield self._eval(node.right, env)
        try:
            return BINARY_OPERATIONS[node.operator](left, right)
        except XyloRuntimeError as error:
            raise _locate(error, node.location)

    def _unary(self, node: UnaryExpression, env: Environment):
        operand = yield self._eval(node.operand, env)
        try:
            return UNARY_OPERATIONS[node.operator](operand)
        except XyloRuntimeError as error:
            raise _locate(error, node.location)

    def _if(self, node: IfExpression, env: Environment):
        condition = yield self._eval(node.condition, env)
        if not isinstance(condition, bool):
            raise TypeMismatch(f"`if` condition must be a Boolean, found {type_name(condition)}",
                               node.condition.location)
        return (yield self._eval(node.then_branch if condition else node.else_branch, env))

    def _for(self, node: ForExpression, env: Environment):
        iterable = yield self._eval(node.iterable, env)
        results = []
        for item in _iteration_items(iterable, node.iterable.location):
            results.append((yield self._eval(node.body, env.extend({node.variable: item}))))
        return tuple(results)

    def _loop(self, node: LoopExpression, env: Environment):
        count = yield self._eval(node.count, env)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise TypeMismatch(f"`loop` count must be a non-negative integer, found {_show(count)}",
                               node.count.location)
        results = []
        for _ in range(count):
            results.append((yield self._eval(node.body, env)))
        return tuple(results)

    def _let(self, node: LetExpression, env: Environment):
        scope = env
        for binding in node.bindings:
            if binding.parameters:
                scope = scope.extend()
                closure = Closure(binding.name, tuple(binding.parameters), (Alternative(binding.value),), scope)
                scope.define(binding.name, closure)
            else:
                value = yield self._eval(binding.value, scope)
                scope = scope.extend({binding.name: value})
        return (yield self._eval(node.body, scope))


def _show(value: Value) -> str:
    return type_name(value) if isinstance(value, bool) or not isinstance(value, (int, float)) else str(value)


def _iteration_items(value: Value, location: Optional[SourceLocation]) -> Iterable[Value]:
    """What `for` iterates over: a Sequence, a String, or `n` meaning 0..n."""
    if isinstance(value, tuple):
        return value
    if isinstance(value, str):
        return tuple(value)
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise TypeMismatch(f"cannot iterate over a negative count ({value})", location)
        return range(value)
    raise TypeMismatch(f"cannot iterate over {type_name(value)}", location,
                       help="iterate over a range `a..b`, a count, a list or a string")


def evaluate(expr: Expression,
             env: Union[Environment, Mapping[str, Value], None] = None,
             program: Optional[Program] = None,
             seed: Seed = DEFAULT_SEED,
             width: int = DEFAULT_CANVAS_SIZE,
             height: int = DEFAULT_CANVAS_SIZE,
             max_depth: int = DEFAULT_MAX_DEPTH) -> Value:
    """Evaluate one expression with a fresh evaluator."""
    return Evaluator(program, seed, width, height, max_depth).evaluate(expr, env)
