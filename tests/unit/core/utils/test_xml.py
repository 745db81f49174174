"""Tests for the XML body builder and response converters."""

import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from beanstalk_api.core.exceptions import ParseError
from beanstalk_api.core.utils.xml import (
    build_xml,
    element_to_python,
    extract_errors,
    parse_xml,
    to_xml_text,
)


class TestBuildXml:
    def test_fields_in_order(self):
        body = build_xml("user", [("login", "jane"), ("first-name", "Jane")])

        assert body == "<user><login>jane</login><first-name>Jane</first-name></user>"

    def test_none_values_skipped(self):
        body = build_xml("public-key", [("content", "ssh-rsa"), ("name", None)])

        assert body == "<public-key><content>ssh-rsa</content></public-key>"

    def test_type_attribute(self):
        body = build_xml("release", [("revision", 12, "integer")])

        assert body == '<release><revision type="integer">12</revision></release>'

    def test_empty_fields_gives_empty_root(self):
        assert build_xml("account", []) == "<account />"

    def test_empty_string_kept(self):
        element = ET.fromstring(build_xml("release", [("comment", "")]))

        assert element.find("comment") is not None

    @pytest.mark.parametrize(
        "value, text",
        [(True, "true"), (False, "false"), (0, "0"), (21, "21"), ("grey", "grey")],
    )
    def test_to_xml_text(self, value, text):
        assert to_xml_text(value) == text


class TestParseXml:
    def test_returns_root(self):
        root = parse_xml('<?xml version="1.0"?><account><name>Acme</name></account>')

        assert root.tag == "account"
        assert root.findtext("name") == "Acme"

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_empty_returns_none(self, text):
        assert parse_xml(text) is None

    @pytest.mark.parametrize(
        "text", ["<account><name>Acme</name>", "not xml at all", "<a></b>"]
    )
    def test_malformed_raises(self, text):
        with pytest.raises(ParseError) as exc_info:
            parse_xml(text)

        assert exc_info.value.body == text
        assert isinstance(exc_info.value.__cause__, ET.ParseError)

    def test_bytes_use_declared_encoding(self):
        body = '<?xml version="1.0" encoding="ISO-8859-1"?><user><login>Zoë</login></user>'

        root = parse_xml(body.encode("latin-1"))

        assert root.findtext("login") == "Zoë"

    def test_bytes_default_to_utf8(self):
        root = parse_xml("<user><login>Zoë</login></user>".encode("utf-8"))

        assert root.findtext("login") == "Zoë"

    def test_empty_bytes_return_none(self):
        assert parse_xml(b"  ") is None

    @pytest.mark.parametrize(
        "text",
        [
            '<!DOCTYPE user [<!ENTITY name "jane">]><user><login>&name;</login></user>',
            "<!DOCTYPE user><user/>",
        ],
    )
    def test_dtd_refused(self, text):
        with pytest.raises(ParseError) as exc_info:
            parse_xml(text.encode("utf-8"))

        assert exc_info.value.body == text

    def test_dtd_in_error_body_ignored(self):
        text = '<!DOCTYPE errors [<!ENTITY e "boom">]><errors><error>&e;</error></errors>'

        assert extract_errors(text) == []


class TestExtractErrors:
    def test_errors_document(self):
        text = "<errors><error>Name is blank</error><error> Title is blank </error></errors>"

        assert extract_errors(text) == ["Name is blank", "Title is blank"]

    def test_single_error_element(self):
        assert extract_errors("<error>Access denied</error>") == ["Access denied"]

    @pytest.mark.parametrize(
        "text", ["", "Not Found", "<html><body>502</body></html>", "<errors>"]
    )
    def test_other_bodies_yield_nothing(self, text):
        assert extract_errors(text) == []


class TestElementToPython:
    def test_typed_record(self):
        root = ET.fromstring(
            """
            <user>
              <id type="integer">12</id>
              <login>jane</login>
              <admin type="boolean">true</admin>
              <owner type="boolean">false</owner>
              <timezone nil="true"></timezone>
              <created-at type="datetime">2010-05-03T16:42:07Z</created-at>
            </user>
            """
        )

        user = element_to_python(root)

        assert user == {
            "id": 12,
            "login": "jane",
            "admin": True,
            "owner": False,
            "timezone": None,
            "created-at": datetime(2010, 5, 3, 16, 42, 7, tzinfo=timezone.utc),
        }

    def test_datetime_with_offset(self):
        root = ET.fromstring(
            '<updated-at type="datetime">2009-09-10T12:56:58+03:00</updated-at>'
        )

        value = element_to_python(root)

        assert value.utcoffset() == timedelta(hours=3)

    def test_unparseable_values_kept_as_text(self):
        root = ET.fromstring(
            '<r><id type="integer">abc</id><at type="datetime">soon</at></r>'
        )

        assert element_to_python(root) == {"id": "abc", "at": "soon"}

    def test_array(self):
        root = ET.fromstring(
            """
            <repositories type="array">
              <repository><id type="integer">1</id><name>web</name></repository>
              <repository><id type="integer">2</id><name>api</name></repository>
            </repositories>
            """
        )

        assert element_to_python(root) == [
            {"id": 1, "name": "web"},
            {"id": 2, "name": "api"},
        ]

    def test_empty_array(self):
        assert element_to_python(ET.fromstring('<users type="array"></users>')) == []

    def test_repeated_tags_collected(self):
        root = ET.fromstring("<plan><feature>ssh</feature><feature>ftp</feature></plan>")

        assert element_to_python(root) == {"feature": ["ssh", "ftp"]}

    def test_nested_record(self):
        root = ET.fromstring(
            "<release><server-environment><name>prod</name></server-environment></release>"
        )

        assert element_to_python(root) == {"server-environment": {"name": "prod"}}

    def test_none_input(self):
        assert element_to_python(None) is None

    def test_empty_untyped_element_is_empty_string(self):
        assert element_to_python(ET.fromstring("<r><title/></r>")) == {"title": ""}

    def test_empty_typed_element_is_none(self):
        root = ET.fromstring('<r><port type="integer"/></r>')

        assert element_to_python(root) == {"port": None}
