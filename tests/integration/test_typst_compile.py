"""
Integration tests for rendering - tests real Typst compilation.
"""

import shutil

import pytest
from fastapi.testclient import TestClient

from givetypst.contexts.rendering.compiler import LocalTypstCompiler, compile_typst
from givetypst.contexts.serving.app import create_app
from givetypst.exceptions import CompileError
from givetypst.utils.config import ServerSettings

# Check if typst is available
TYPST_AVAILABLE = shutil.which("typst") is not None
skip_if_no_typst = pytest.mark.skipif(
    not TYPST_AVAILABLE,
    reason="typst not installed - see https://github.com/typst/typst#installation"
)


@pytest.fixture()
def compiler():
    return LocalTypstCompiler()


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_simple_document(compiler):
    pdf = compile_typst("= Hello World\n\nThis is a test document.", None, compiler=compiler)

    assert pdf.startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_with_data(compiler):
    source = '#let data = json("data.json")\n= Hello #data.name\n\nAge: #data.age'

    pdf = compile_typst(source, {"name": "John", "age": 30}, compiler=compiler)

    assert pdf.startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_with_nested_data(compiler):
    source = (
        '#let data = json("data.json")\n'
        "= Invoice for #data.customer.name\n"
        "#for item in data.items [\n"
        "  - #item.description: #item.qty\n"
        "]\n"
    )
    data = {
        "customer": {"name": "Ada"},
        "items": [{"description": "Widget", "qty": 2}, {"description": "Gadget", "qty": 1}],
    }

    pdf = compile_typst(source, data, compiler=compiler)

    assert pdf.startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_invalid_syntax(compiler):
    with pytest.raises(CompileError) as exc_info:
        compile_typst("#invalid-function-that-does-not-exist()", None, compiler=compiler)

    assert str(exc_info.value).startswith("compile failed:")
    assert exc_info.value.output


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_missing_data_file(compiler):
    """A template that reads data.json fails when no data was supplied."""
    with pytest.raises(CompileError):
        compile_typst('#let data = json("data.json")\n#data.name', None, compiler=compiler)


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_empty_source(compiler):
    assert compile_typst("", None, compiler=compiler).startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_compile_empty_data(compiler):
    pdf = compile_typst('#let data = json("data.json")\n= Empty', {}, compiler=compiler)

    assert pdf.startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.typst
@skip_if_no_typst
def test_generate_end_to_end(make_bucket, compiler):
    bucket_url = make_bucket(
        {
            "invoice.typ": b'#let data = json("data.json")\n= Invoice #data.number',
            "invoice.json": b'{"number": "INV-001"}',
        }
    )
    client = TestClient(create_app(ServerSettings(bucket_url=bucket_url), compiler=compiler))

    assert client.get("/health").status_code == 200

    response = client.post("/generate", json={"templateKey": "invoice.typ", "dataKey": "invoice.json"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
