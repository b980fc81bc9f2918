"""Tests for arithmetic expansion."""

import pytest
from tinysh import Shell


class TestArithmeticPrecedence:
    """Test operator precedence and associativity."""

    @pytest.mark.asyncio
    async def test_product_before_sum(self):
        shell = Shell()
        result = await shell.exec("echo $((1 + 5 * 5))")
        assert result.stdout == "26\n"

    @pytest.mark.asyncio
    async def test_grouping(self):
        shell = Shell()
        result = await shell.exec("echo $(((1 + 5) * 5))")
        assert result.stdout == "30\n"

    @pytest.mark.asyncio
    async def test_spaced_grouping(self):
        shell = Shell()
        result = await shell.exec("echo $(( (1 + 5) * 5 ))")
        assert result.stdout == "30\n"

    @pytest.mark.asyncio
    async def test_left_to_right_chain(self):
        shell = Shell()
        result = await shell.exec("echo $((5 + 4 + 3 + 2 + 1))")
        assert result.stdout == "15\n"

    @pytest.mark.asyncio
    async def test_subtraction_is_left_associative(self):
        shell = Shell()
        result = await shell.exec("echo $((10 - 4 - 3))")
        assert result.stdout == "3\n"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "a, b",
        [(0, 0), (2, 3), (-4, 7), (123456789, 987654321)],
    )
    async def test_matches_host_arithmetic(self, a, b):
        shell = Shell()
        result = await shell.exec(f"a={a}; b={b}; echo $((a + b)) $((a * b))")
        assert result.stdout == f"{a + b} {a * b}\n"


class TestArithmeticDivisionModulo:
    """Test C-style truncation division and modulo."""

    @pytest.mark.asyncio
    async def test_positive_division(self):
        shell = Shell()
        result = await shell.exec("echo $((7 / 2))")
        assert result.stdout == "3\n"

    @pytest.mark.asyncio
    async def test_negative_division_truncates_toward_zero(self):
        """-7/2 is -3 (C truncation), not -4 (Python floor)."""
        shell = Shell()
        result = await shell.exec("echo $((-7 / 2))")
        assert result.stdout == "-3\n"

    @pytest.mark.asyncio
    async def test_negative_modulo(self):
        """-7%2 is -1 (sign of the dividend), not 1 (Python)."""
        shell = Shell()
        result = await shell.exec("echo $((-7 % 2))")
        assert result.stdout == "-1\n"

    @pytest.mark.asyncio
    async def test_division_by_zero(self):
        shell = Shell()
        result = await shell.exec("echo $((1 / 0))")
        assert result.exit_code == 1
        assert "division by 0" in result.stderr

    @pytest.mark.asyncio
    async def test_unary_minus(self):
        shell = Shell()
        result = await shell.exec("echo $((-5)) $((3 - -2))")
        assert result.stdout == "-5 5\n"


class TestArithmeticVariables:
    """Test variable reads under arithmetic rules."""

    @pytest.mark.asyncio
    async def test_unset_is_zero(self):
        shell = Shell()
        result = await shell.exec("echo $((a+4))")
        assert result.stdout == "4\n"

    @pytest.mark.asyncio
    async def test_sigil_is_optional(self):
        shell = Shell()
        result = await shell.exec("a=3; echo $(($a + a))")
        assert result.stdout == "6\n"

    @pytest.mark.asyncio
    async def test_integer_text_is_a_number(self):
        shell = Shell()
        result = await shell.exec('a="12"; echo $((a * 2))')
        assert result.stdout == "24\n"

    @pytest.mark.asyncio
    async def test_empty_string_is_zero(self):
        shell = Shell()
        result = await shell.exec("a=; echo $((a + 1))")
        assert result.stdout == "1\n"

    @pytest.mark.asyncio
    async def test_positional_parameter(self):
        shell = Shell()
        result = await shell.exec("echo $(($1 + 1))", args=["41"])
        assert result.stdout == "42\n"

    @pytest.mark.asyncio
    async def test_non_numeric_text_is_an_error(self):
        shell = Shell()
        result = await shell.exec("a=abc; echo $((a + 1))")
        assert result.exit_code == 1
        assert "unhandled operator" in result.stderr

    @pytest.mark.asyncio
    async def test_counter(self):
        shell = Shell()
        result = await shell.exec("n=0; n=$((n + 1)); n=$((n + 1)); echo $n")
        assert result.stdout == "2\n"

    @pytest.mark.asyncio
    async def test_nested_expansion(self):
        shell = Shell()
        result = await shell.exec("echo $(( $((2 * 3)) + 1 ))")
        assert result.stdout == "7\n"

    @pytest.mark.asyncio
    async def test_braced_parameter(self):
        shell = Shell()
        result = await shell.exec("a=4; echo $((${a} * 2))")
        assert result.stdout == "8\n"
