"""Per-language tables: type inference, parsing, display cleanup and scoring."""

import pytest

from valuelens.handlers import (
    CppHandler,
    GoHandler,
    JavaHandler,
    JavaScriptHandler,
    PythonHandler,
)
from valuelens.handlers.base import ValueCategory


# --- Go ---


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("x", "nil", "nil"),
        ("x", "true", "bool"),
        ("x", '"hi"', "string"),
        ("x", "3.14", "float64"),
        ("createTime", "x", "time.Time"),
        ("userId", "42", "int64"),
        ("itemCount", "x", "int"),
        ("ctx", "0xc000010000", "context.Context"),
        ("req", "x", "http.Request"),
        ("node", "*main.Node {next: nil}", "*struct"),
        ("node", "main.Node {next: nil}", "struct"),
        ("items", "[]int len: 3, cap: 3, [1,2,3]", "slice"),
        ("m", 'map[string]int ["a": 1, ]', "map"),
        ("n", "7", "int"),
        ("v", "something", "interface{}"),
    ],
)
def test_go_infer_type(go_handler: GoHandler, name, value, expected):
    assert go_handler.infer_type(name, value) == expected


def test_go_literal_beats_name_keyword(go_handler: GoHandler):
    """A quoted literal is a string even when the name suggests a timestamp."""
    assert go_handler.infer_type("createTime", '"2024-01-01"') == "string"


def test_go_nil(go_handler: GoHandler):
    parsed = go_handler.parse_variable_value("nil", "*main.User")
    assert parsed.is_nil
    assert parsed.display_value == "nil"
    assert not parsed.is_expandable


def test_go_bare_pointer(go_handler: GoHandler):
    """An address with a pointer type is an expandable pointer."""
    parsed = go_handler.parse_variable_value("0xc0000140a0", "*int")
    assert parsed.is_pointer
    assert parsed.memory_address == "0xc0000140a0"
    assert parsed.is_expandable


def test_go_struct_with_pointer_field_is_not_a_pointer(go_handler: GoHandler):
    """An address inside the payload does not make the value a pointer."""
    parsed = go_handler.parse_variable_value("main.Node {next: 0xc0000140a0}", "main.Node")
    assert not parsed.is_pointer
    assert parsed.memory_address is None
    assert parsed.object_key_count == 1


def test_go_slice_header_length(go_handler: GoHandler):
    """The ``len:`` header gives the true length."""
    raw = "[]int len: 5, cap: 5, [1,2,3]"
    parsed = go_handler.parse_variable_value(raw, "[]int")
    assert parsed.array_length == 5
    assert go_handler.parse_array_elements(raw) == ["1", "2", "3"]


def test_go_map_fields(go_handler: GoHandler):
    """Map entries parse as fields with key quotes removed."""
    fields = go_handler.parse_struct_fields('map[string]int ["a": 1, "b": 2, ]')
    assert fields == {"a": "1", "b": "2"}


def test_go_element_type_from_container(go_handler: GoHandler):
    assert go_handler.element_type("[]string", '"x"', 0) == "string"
    assert go_handler.element_type("[3]int", "1", 2) == "int"
    assert go_handler.element_type("slice", "1", 0) == "int"


def test_go_extract_function_name(go_handler: GoHandler):
    assert go_handler.extract_function_name("main.main") == "main.main"
    assert (
        go_handler.extract_function_name("github.com/acme/svc/pkg.(*Server).Handle")
        == "pkg.(*Server).Handle"
    )
    long_name = "pkg." + "VeryLongTypeName" * 3 + ".Method"
    assert go_handler.extract_function_name(long_name) == "VeryLongTypeNameVeryLongTypeNameVeryLongTypeName.Method"


def test_go_format_display_value(go_handler: GoHandler):
    assert go_handler.format_display_value('"hello"', "string") == "hello"
    assert go_handler.format_display_value("<nil>", "error") == "nil"
    assert go_handler.format_display_value('"hello"', "[]byte") == '"hello"'


def test_go_compiler_temporaries_rank_low(go_handler: GoHandler):
    assert go_handler.calculate_variable_importance("~r0", "1") < 0
    assert go_handler.calculate_variable_importance("autotmp_3", "1") < 0
    assert go_handler.is_system_variable("autotmp_3")


def test_go_category(go_handler: GoHandler):
    assert go_handler.value_category("nil", "") is ValueCategory.NIL
    assert go_handler.value_category("0xc000010000", "*int") is ValueCategory.POINTER
    assert go_handler.value_category("42", "int") is ValueCategory.PRIMITIVE
    assert go_handler.value_category("{A: 1}", "main.T") is ValueCategory.STRUCTURED
    assert go_handler.value_category("[1, 2]", "[]int") is ValueCategory.COLLECTION


# --- C / C++ ---


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("x", "nullptr", "nullptr_t"),
        ("x", "42", "int"),
        ("x", "42u", "unsigned int"),
        ("x", "42l", "long"),
        ("x", "42ll", "long long"),
        ("x", "3.5f", "double"),
        ("x", '"abc"', "std::string"),
        ("x", "'a'", "char"),
        ("x", "0x7ffd5fbff8a0", "pointer"),
        ("x", "{a = 1}", "struct/class"),
        ("x", "std::vector of length 3, capacity 4 = {1, 2, 3}", "std::vector"),
        ("message", "abc", "std::string"),
        ("userCount", "abc", "size_t"),
        ("requestId", "17", "int"),
        ("v", "abc", "auto"),
    ],
)
def test_cpp_infer_type(cpp_handler: CppHandler, name, value, expected):
    assert cpp_handler.infer_type(name, value) == expected


def test_cpp_struct_fields_prefer_equals(cpp_handler: CppHandler):
    fields = cpp_handler.parse_struct_fields('{name = "x", next = 0x0, inner = {a = 1}}')
    assert fields == {"name": '"x"', "next": "0x0", "inner": "{a = 1}"}


def test_cpp_stl_container_length(cpp_handler: CppHandler):
    """``of length N`` gives the true size even when gdb prints fewer elements."""
    raw = "std::vector of length 100, capacity 128 = {0, 1, 2, 3}"
    parsed = cpp_handler.parse_variable_value(raw, "std::vector<int>")
    assert parsed.array_length == 100
    assert cpp_handler.parse_array_elements(raw) == ["0", "1", "2", "3"]
    assert not parsed.is_pointer


def test_cpp_nil_spellings(cpp_handler: CppHandler):
    for token in ("nullptr", "NULL", "0x0", "(null)"):
        assert cpp_handler.format_display_value(token, "Node*") == "nullptr"


def test_cpp_format_display_value(cpp_handler: CppHandler):
    assert cpp_handler.format_display_value('"abc"', "std::string") == "abc"
    assert cpp_handler.format_display_value("'a'", "char") == "a"
    assert cpp_handler.format_display_value("0x7ffd", "int*") == "*0x7ffd"


def test_cpp_extract_function_name(cpp_handler: CppHandler):
    assert (
        cpp_handler.extract_function_name("ns::detail::Widget<int>::draw(int) const")
        == "detail::Widget::draw()"
    )
    assert cpp_handler.extract_function_name("main(int, char**)") == "main()"
    assert (
        cpp_handler.extract_function_name("std::map<std::string, std::vector<int>>::at(key)")
        == "std::map::at()"
    )


def test_cpp_system_names(cpp_handler: CppHandler):
    """Leading underscores mark implementation names; inner ones do not."""
    assert cpp_handler.is_system_variable("_M_impl")
    assert cpp_handler.is_system_variable("__vptr")
    assert not cpp_handler.is_system_variable("my_value")
    assert cpp_handler.is_system_variable("x", "std::allocator<int>")


def test_cpp_importance(cpp_handler: CppHandler):
    assert cpp_handler.calculate_variable_importance("_vptr.Widget", "0x4010") < 0
    assert cpp_handler.calculate_variable_importance(
        "requestManager", "{...}"
    ) > cpp_handler.calculate_variable_importance("request", "{...}")


def test_cpp_qualified_primitives(cpp_handler: CppHandler):
    assert cpp_handler.is_primitive_type("1", "const int&")
    assert cpp_handler.is_primitive_type("1", "unsigned  long")
    assert not cpp_handler.is_primitive_type("1", "std::string")


# --- Python ---


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("x", "None", "NoneType"),
        ("x", "True", "bool"),
        ("x", "'a'", "str"),
        ("x", "42", "int"),
        ("x", "4.2", "float"),
        ("x", "[1]", "list"),
        ("x", "{'a': 1}", "dict"),
        ("x", "(1, 2)", "tuple"),
        ("x", "<app.User object at 0x10a2b3c40>", "object"),
        ("x", "<function f at 0x10>", "function"),
        ("x", "<class 'int'>", "type"),
        ("x", "<module 'os'>", "module"),
        ("request", "~", "HttpRequest"),
        ("userForm", "~", "Form"),
        ("db", "~", "Database"),
        ("v", "~", "object"),
    ],
)
def test_python_infer_type(python_handler: PythonHandler, name, value, expected):
    assert python_handler.infer_type(name, value) == expected


def test_python_dict_keys_keep_repr_quotes(python_handler: PythonHandler):
    fields = python_handler.parse_struct_fields("{'name': 'bob', 'tags': ['a', 'b']}")
    assert fields == {"'name'": "'bob'", "'tags'": "['a', 'b']"}


def test_python_tuple_and_set_elements(python_handler: PythonHandler):
    assert python_handler.parse_array_elements("(1, 'a, b')") == ["1", "'a, b'"]
    assert python_handler.parse_array_elements("{1, 2, 3}") == ["1", "2", "3"]
    assert python_handler.parse_array_elements("{'a': 1}") == []
    assert python_handler.parse_struct_fields("{1, 2, 3}") == {}


def test_python_object_repr(python_handler: PythonHandler):
    raw = "<app.models.User object at 0x10a2b3c40>"
    parsed = python_handler.parse_variable_value(raw, "User")
    assert parsed.is_pointer
    assert parsed.memory_address == "0x10a2b3c40"
    assert parsed.is_expandable
    assert python_handler.pointer_display(raw, "User", show_address=False) == (
        "<app.models.User object>"
    )


def test_python_containers_of_objects_are_not_pointers(python_handler: PythonHandler):
    raw_list = "[<__main__.Foo object at 0x10a>, <__main__.Bar object at 0x20b>]"
    parsed = python_handler.parse_variable_value(raw_list, "list")
    assert not parsed.is_pointer
    assert parsed.memory_address is None
    assert parsed.array_length == 2
    assert parsed.display_value == raw_list

    raw_dict = "{'a': <__main__.Foo object at 0x10a>}"
    parsed = python_handler.parse_variable_value(raw_dict, "dict")
    assert not parsed.is_pointer
    assert parsed.memory_address is None
    assert parsed.object_key_count == 1
    assert parsed.display_value == raw_dict


def test_python_quoted_address_is_a_string(python_handler: PythonHandler):
    parsed = python_handler.parse_variable_value("'<x object at 0x10>'", "str")
    assert not parsed.is_pointer
    assert parsed.display_value == "<x object at 0x10>"


def test_python_extract_function_name(python_handler: PythonHandler):
    assert python_handler.extract_function_name("<module>") == "module"
    assert python_handler.extract_function_name("pkg.sub.mod.Class.method") == "mod.Class.method"


def test_python_private_names_rank_lower(python_handler: PythonHandler):
    assert python_handler.calculate_variable_importance("__class__", "1") < 0
    assert python_handler.calculate_variable_importance(
        "_private", "1"
    ) < python_handler.calculate_variable_importance("public", "1")


# --- Java ---


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("x", "null", "null"),
        ("x", "true", "boolean"),
        ("orderId", "12", "int"),
        ("x", "12L", "long"),
        ("x", "1.5", "double"),
        ("x", '"s"', "String"),
        ("x", "[a, b]", "Array"),
        ("x", "com.acme.User@1b6d3586 name=bob", "com.acme.User"),
        ("userList", "~", "List"),
        ("totalPrice", "~", "BigDecimal"),
        ("request", "~", "HttpServletRequest"),
        ("orderRepository", "~", "Repository"),
        ("v", "~", "Object"),
    ],
)
def test_java_infer_type(java_handler: JavaHandler, name, value, expected):
    assert java_handler.infer_type(name, value) == expected


def test_java_identity_display(java_handler: JavaHandler):
    assert java_handler.format_display_value("com.acme.User@1b6d3586", "User") == "<User object>"
    assert java_handler.format_display_value('"hi"', "String") == "hi"
    assert java_handler.format_display_value("bob@example.com", "String") == "bob@example.com"


def test_java_collection_size_header(java_handler: JavaHandler):
    raw = "ArrayList (size=5) [a, b]"
    parsed = java_handler.parse_variable_value(raw, "java.util.ArrayList")
    assert parsed.array_length == 5
    assert java_handler.parse_array_elements(raw) == ["a", "b"]


def test_java_object_fields(java_handler: JavaHandler):
    fields = java_handler.parse_struct_fields('User{name="bob", age=3}')
    assert fields == {"name": '"bob"', "age": "3"}


def test_java_synthetic_fields_rank_low(java_handler: JavaHandler):
    assert java_handler.calculate_variable_importance("this$0", "") < 0
    assert java_handler.calculate_variable_importance(
        "userService", "x"
    ) > java_handler.calculate_variable_importance("counter", "x")
    assert java_handler.is_system_variable("x", "java.util.HashMap@1f")


def test_java_boxed_lang_types_are_primitive(java_handler: JavaHandler):
    assert java_handler.is_primitive_type("1", "java.lang.Integer")
    assert not java_handler.is_primitive_type("1", "java.util.List")


# --- JavaScript ---


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("x", "undefined", "undefined"),
        ("x", "null", "null"),
        ("x", "42", "number"),
        ("x", "`t`", "string"),
        ("x", "[1]", "Array"),
        ("x", "{a: 1}", "Object"),
        ("x", "function f() {}", "Function"),
        ("x", "async function f() {}", "AsyncFunction"),
        ("x", "/ab+c/i", "RegExp"),
        ("x", "Promise { <pending> }", "Promise"),
        ("req", "~", "Request"),
        ("res", "~", "Response"),
        ("onClickCallback", "~", "Function"),
        ("v", "~", "object"),
    ],
)
def test_js_infer_type(js_handler: JavaScriptHandler, name, value, expected):
    assert js_handler.infer_type(name, value) == expected


def test_js_array_header_length(js_handler: JavaScriptHandler):
    parsed = js_handler.parse_variable_value("Array(3) [1, 2, 3]", "Array")
    assert parsed.array_length == 3


def test_js_keys_lose_quotes(js_handler: JavaScriptHandler):
    assert js_handler.parse_struct_fields("{\"a\": 1, 'b': `x,y`}") == {"a": "1", "b": "`x,y`"}


def test_js_format_display_value(js_handler: JavaScriptHandler):
    assert js_handler.format_display_value("function foo(a) { return a; }", "Function") == (
        "function foo()"
    )
    assert js_handler.format_display_value("function (a) {}", "Function") == "function()"
    assert js_handler.format_display_value("'hi'", "string") == "hi"
    assert js_handler.format_display_value("undefined", "") == "undefined"


def test_js_extract_function_name(js_handler: JavaScriptHandler):
    assert js_handler.extract_function_name("(anonymous)") == "anonymous"
    assert js_handler.extract_function_name("() => x") == "arrow function"
    assert js_handler.extract_function_name("function handleClick") == "handleClick"


def test_js_primitive_names_are_case_insensitive(js_handler: JavaScriptHandler):
    assert js_handler.is_primitive_type("1", "Number")
    assert not js_handler.is_primitive_type("{}", "Object")


def test_js_importance(js_handler: JavaScriptHandler):
    assert js_handler.calculate_variable_importance("__proto__", "{}") < 0
    assert js_handler.calculate_variable_importance(
        "clickHandler", "x"
    ) > js_handler.calculate_variable_importance("counter", "x")
