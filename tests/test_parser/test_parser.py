"""Tests for the parser."""

import pytest
from tinysh.ast import (
    ArithmeticExpression,
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    Condition,
    ExpressionStatement,
    FunctionApplication,
    Identifier,
    InfixExpression,
    NumberConstant,
    PrefixExpression,
    Program,
    StringConstant,
    WholeArray,
)
from tinysh.parser import LexerError, Lexer, ParseException, Parser, parse, parse_expansion


def single_statement(source: str):
    program = parse(source)
    assert len(program.statements) == 1
    return program.statements[0]


def arithmetic(source: str):
    statement = single_statement(f"$(({source}))")
    assert isinstance(statement, ExpressionStatement)
    assert isinstance(statement.expression, ArithmeticExpression)
    return statement.expression.inner


def echo(*args):
    return ExpressionStatement(FunctionApplication(StringConstant("echo"), tuple(args)))


class TestProgram:
    """Test statement sequencing."""

    def test_empty_script(self):
        assert parse("") == Program(())
        assert parse("\n\n# only a comment\n") == Program(())

    def test_statements_in_order(self):
        program = parse("echo a; echo b\necho c")
        assert program.statements == (
            echo(StringConstant("a")),
            echo(StringConstant("b")),
            echo(StringConstant("c")),
        )

    def test_trailing_semicolon(self):
        assert parse("echo a;\n") == Program((echo(StringConstant("a")),))


class TestFunctionApplication:
    """Test juxtaposition as the call operator."""

    def test_arguments_are_not_combined(self):
        assert single_statement("echo 5 6") == echo(NumberConstant(5), NumberConstant(6))

    def test_command_without_arguments(self):
        assert single_statement("ls") == ExpressionStatement(StringConstant("ls"))

    def test_mixed_arguments(self):
        statement = single_statement("echo x $((1)) ${y}")
        assert statement == echo(
            StringConstant("x"),
            ArithmeticExpression(NumberConstant(1)),
            Identifier("$y"),
        )

    def test_keywords_as_arguments(self):
        assert single_statement("echo then") == echo(StringConstant("then"))

    def test_single_quote_flag(self):
        assert single_statement("echo '$x'") == echo(StringConstant("$x", True))


class TestArithmetic:
    """Test precedence climbing inside $(( ... ))."""

    def test_product_binds_tighter(self):
        assert arithmetic("1 + 5 * 5") == InfixExpression(
            NumberConstant(1),
            InfixExpression(NumberConstant(5), NumberConstant(5), "*"),
            "+",
        )

    def test_grouping(self):
        assert arithmetic("(1 + 5) * 5") == InfixExpression(
            InfixExpression(NumberConstant(1), NumberConstant(5), "+"),
            NumberConstant(5),
            "*",
        )

    def test_left_associative(self):
        assert arithmetic("5 - 4 - 3") == InfixExpression(
            InfixExpression(NumberConstant(5), NumberConstant(4), "-"),
            NumberConstant(3),
            "-",
        )

    def test_identifiers(self):
        assert arithmetic("a + $b") == InfixExpression(Identifier("a"), Identifier("$b"), "+")

    def test_unary_minus(self):
        assert arithmetic("-5 * 2") == InfixExpression(
            PrefixExpression("-", NumberConstant(5)),
            NumberConstant(2),
            "*",
        )

    def test_subscript(self):
        assert arithmetic("a[1 + 1] % 2") == InfixExpression(
            ArrayAccess(
                Identifier("a"),
                InfixExpression(NumberConstant(1), NumberConstant(1), "+"),
            ),
            NumberConstant(2),
            "%",
        )

    def test_nested_expansion(self):
        assert arithmetic("$((2)) / 2") == InfixExpression(
            ArithmeticExpression(NumberConstant(2)),
            NumberConstant(2),
            "/",
        )


class TestAssignment:
    """Test assignment statements."""

    def test_number(self):
        assert single_statement("a=5") == Assignment(Identifier("a"), NumberConstant(5))

    def test_string(self):
        assert single_statement('a="x y"') == Assignment(Identifier("a"), StringConstant("x y"))

    def test_empty_value(self):
        assert parse("a=\necho") == Program((
            Assignment(Identifier("a"), StringConstant("")),
            ExpressionStatement(StringConstant("echo")),
        ))

    def test_array_literal(self):
        assert single_statement("name=(foo bar)") == Assignment(
            Identifier("name"),
            ArrayLiteral((StringConstant("foo"), StringConstant("bar"))),
        )

    def test_empty_array_literal(self):
        assert single_statement("name=()") == Assignment(Identifier("name"), ArrayLiteral(()))

    def test_index_assignment(self):
        assert single_statement("name[1]=x") == Assignment(
            ArrayAccess(Identifier("name"), NumberConstant(1)),
            StringConstant("x"),
        )

    def test_arithmetic_value(self):
        assert single_statement("n=$((n + 1))") == Assignment(
            Identifier("n"),
            ArithmeticExpression(InfixExpression(Identifier("n"), NumberConstant(1), "+")),
        )


class TestParameterExpansion:
    """Test ${ ... } forms."""

    def test_name(self):
        assert single_statement("echo ${foo}") == echo(Identifier("$foo"))

    def test_element(self):
        assert single_statement("echo ${a[0]}") == echo(
            ArrayAccess(Identifier("a"), NumberConstant(0))
        )

    def test_whole_array(self):
        assert single_statement("echo ${a[@]} ${a[*]}") == echo(
            ArrayAccess(Identifier("a"), WholeArray("@")),
            ArrayAccess(Identifier("a"), WholeArray("*")),
        )

    def test_length(self):
        assert single_statement("echo ${#a[@]} ${#s}") == echo(
            PrefixExpression("#", ArrayAccess(Identifier("a"), WholeArray("@"))),
            PrefixExpression("#", Identifier("$s")),
        )

    def test_parse_expansion(self):
        assert parse_expansion("${a[i]}") == ArrayAccess(Identifier("a"), Identifier("i"))
        assert parse_expansion("$((1))") == ArithmeticExpression(NumberConstant(1))


class TestCondition:
    """Test if/then/else/fi."""

    def test_if_else(self):
        statement = single_statement("if [ 5 -gt $a ]; then echo yes; else echo no; fi")
        assert statement == Condition(
            InfixExpression(NumberConstant(5), StringConstant("$a"), "-gt"),
            echo(StringConstant("yes")),
            echo(StringConstant("no")),
        )

    def test_if_without_else(self):
        statement = single_statement('if [ "$a" = b ]; then echo same; fi')
        assert statement == Condition(
            InfixExpression(StringConstant("$a"), StringConstant("b"), "="),
            echo(StringConstant("same")),
        )

    def test_multiline(self):
        statement = single_statement("if [ -z $a ]\nthen\n  echo empty\nelse\n  a=1\nfi\n")
        assert statement == Condition(
            PrefixExpression("-z", StringConstant("$a")),
            echo(StringConstant("empty")),
            Assignment(Identifier("a"), NumberConstant(1)),
        )

    def test_nested(self):
        statement = single_statement(
            "if [ 1 -eq 1 ]; then if [ 2 -eq 2 ]; then echo in; fi; fi"
        )
        assert isinstance(statement, Condition)
        assert isinstance(statement.then, Condition)

    def test_string_comparison_binds_loosest(self):
        statement = single_statement("if [ $((1+1)) = 2 ]; then echo ok; fi")
        assert isinstance(statement, Condition)
        assert statement.test == InfixExpression(
            ArithmeticExpression(InfixExpression(NumberConstant(1), NumberConstant(1), "+")),
            NumberConstant(2),
            "=",
        )


class TestParseErrors:
    """Test fatal syntax errors."""

    def test_second_statement_in_branch(self):
        with pytest.raises(ParseException, match="expected 'fi' or 'else'"):
            parse("if [ 1 -eq 1 ]; then echo a; echo b; fi")

    def test_missing_then(self):
        with pytest.raises(ParseException, match="'then'"):
            parse("if [ 1 -eq 1 ]; echo a; fi")

    def test_missing_fi(self):
        with pytest.raises(ParseException, match="end of input"):
            parse("if [ 1 -eq 1 ]; then echo a")

    def test_missing_operand(self):
        with pytest.raises(ParseException, match="no prefix parse function"):
            parse("echo $((1 + ))")

    def test_index_without_value(self):
        with pytest.raises(ParseException, match="'='"):
            parse("name[1]")

    def test_error_names_location(self):
        with pytest.raises(ParseException, match="line 2"):
            parse("echo ok\nif [ 1 -eq 1 ]; then echo a; echo b; fi")

    def test_lexer_errors_propagate(self):
        with pytest.raises(LexerError):
            parse("echo a > b")

    def test_arithmetic_mode_restored_after_error(self):
        parser = Parser(Lexer("$((1 + ))"))
        with pytest.raises(ParseException):
            parser.parse()
        assert parser._arithmetic is False
