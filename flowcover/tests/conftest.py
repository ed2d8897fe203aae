"""Shared statement trees for the builder, criteria and target tests."""

import pytest

from flowcover.parsers.statements import (
    BreakStatement,
    ContinueStatement,
    ExceptHandler,
    FunctionBody,
    IfStatement,
    MatchCase,
    MatchStatement,
    ReturnStatement,
    SimpleStatement,
    TryStatement,
    WhileStatement,
)


def simple(text: str, line: int) -> SimpleStatement:
    return SimpleStatement(text, line, line)


@pytest.fixture
def straight_line_function():
    """def f(): a = 1; b = 2; c = a + b, one statement per line."""
    return FunctionBody(
        "f",
        [simple("a = 1", 2), simple("b = 2", 3), simple("c = a + b", 4)],
        start_line=1,
    )


@pytest.fixture
def if_else_function():
    """
    1 def classify(x):
    2     if x > 0:
    3         y = 1
    4     else:
    5         y = 2
    """
    return FunctionBody(
        "classify",
        [
            IfStatement(
                "if x > 0",
                2,
                5,
                condition="x > 0",
                body=[simple("y = 1", 3)],
                orelse=[simple("y = 2", 5)],
            )
        ],
        start_line=1,
    )


@pytest.fixture
def while_function():
    """
    1 def count():
    2     i = 0
    3     while i < 3:
    4         print(i)
    5         i += 1
    6     return i
    """
    return FunctionBody(
        "count",
        [
            simple("i = 0", 2),
            WhileStatement(
                "while i < 3",
                3,
                5,
                condition="i < 3",
                body=[simple("print(i)", 4), simple("i += 1", 5)],
            ),
            ReturnStatement("return i", 6, 6),
        ],
        start_line=1,
    )


@pytest.fixture
def try_function():
    """
    1 def load():
    2     try:
    3         if a:
    4             b()
    5     except ValueError as e:
    6         log(e)
    7     finally:
    8         cleanup()
    """
    return FunctionBody(
        "load",
        [
            TryStatement(
                "try",
                2,
                8,
                body=[
                    IfStatement("if a", 3, 4, condition="a", body=[simple("b()", 4)])
                ],
                handlers=[
                    ExceptHandler(
                        line=5,
                        type_text="ValueError",
                        name="e",
                        body=[simple("log(e)", 6)],
                    )
                ],
                finalbody=[simple("cleanup()", 8)],
                finally_line=7,
            )
        ],
        start_line=1,
    )


@pytest.fixture
def match_function():
    """
    1 def handle(cmd):
    2     match cmd:
    3         case "go":
    4             move()
    5         case "stop":
    6             return
    7         case _:
    8             if x:
    9                 y()
    """
    return FunctionBody(
        "handle",
        [
            MatchStatement(
                "match cmd",
                2,
                9,
                subject="cmd",
                cases=[
                    MatchCase('"go"', 3, body=[simple("move()", 4)]),
                    MatchCase('"stop"', 5, body=[ReturnStatement("return", 6, 6)]),
                    MatchCase(
                        "_",
                        7,
                        body=[
                            IfStatement(
                                "if x", 8, 9, condition="x", body=[simple("y()", 9)]
                            )
                        ],
                    ),
                ],
            )
        ],
        start_line=1,
    )


@pytest.fixture
def loop_control_function():
    """
    1 def worker():
    2     while True:
    3         if done:
    4             break
    5         if skip:
    6             continue
    7         work()
    8     after()
    """
    return FunctionBody(
        "worker",
        [
            WhileStatement(
                "while True",
                2,
                7,
                condition="True",
                body=[
                    IfStatement(
                        "if done",
                        3,
                        4,
                        condition="done",
                        body=[BreakStatement("break", 4, 4)],
                    ),
                    IfStatement(
                        "if skip",
                        5,
                        6,
                        condition="skip",
                        body=[ContinueStatement("continue", 6, 6)],
                    ),
                    simple("work()", 7),
                ],
            ),
            simple("after()", 8),
        ],
        start_line=1,
    )


@pytest.fixture
def trailing_loop_function():
    """
    1 def spin():
    2     x = 1
    3     while c:
    4         y()
    """
    return FunctionBody(
        "spin",
        [
            simple("x = 1", 2),
            WhileStatement("while c", 3, 4, condition="c", body=[simple("y()", 4)]),
        ],
        start_line=1,
    )


@pytest.fixture
def loop_then_match_function():
    """
    1 def k(x):
    2     while x:
    3         pass
    4     match x:
    5         case 1:
    6             return 1
    """
    return FunctionBody(
        "k",
        [
            WhileStatement("while x", 2, 3, condition="x", body=[simple("pass", 3)]),
            MatchStatement(
                "match x",
                4,
                6,
                subject="x",
                cases=[MatchCase("1", 5, body=[ReturnStatement("return 1", 6, 6)])],
            ),
        ],
        start_line=1,
    )
