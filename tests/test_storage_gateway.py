import pytest

from utils.errors import StoreFault


@pytest.mark.asyncio
async def test_insert_reports_last_row_id_and_affected_rows(gateway):
    result = await gateway.execute(
        "INSERT INTO students (name, dob, contact, image) VALUES (?, ?, ?, ?)",
        ("Ada", "1990-01-01", "555-0100", None),
    )
    assert result.last_row_id == 1
    assert result.affected_rows == 1
    assert result.rows == []


@pytest.mark.asyncio
async def test_select_returns_rows_as_tuples(gateway):
    await gateway.execute("INSERT INTO students (name) VALUES (?)", ("Grace",))
    result = await gateway.execute("SELECT id, name FROM students")
    assert result.rows == [(1, "Grace")]


@pytest.mark.asyncio
async def test_malformed_query_raises_store_fault(gateway):
    with pytest.raises(StoreFault) as excinfo:
        await gateway.execute("SELEKT * FROM students")
    assert excinfo.value.statement == "SELEKT * FROM students"
    assert excinfo.value.__cause__ is not None


@pytest.mark.asyncio
async def test_unknown_table_raises_store_fault(gateway):
    with pytest.raises(StoreFault):
        await gateway.execute("SELECT * FROM teachers")
