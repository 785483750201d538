"""
Tests for mboxcore.mbox.mime_decoder.MimeDecoder.
"""
import base64
import quopri

import pytest

from mboxcore.mbox.mime_decoder import MimeDecoder


NESTED_MESSAGE = (
    "From: a@example.com\n"
    "Subject: Report\n"
    'Content-Type: multipart/mixed; boundary="outer"\n'
    "\n"
    "This is a multi-part message in MIME format.\n"
    "--outer\n"
    'Content-Type: multipart/alternative; boundary="inner"\n'
    "\n"
    "--inner\n"
    "Content-Type: text/plain; charset=utf-8\n"
    "\n"
    "Plain body\n"
    "--inner\n"
    "Content-Type: text/html; charset=utf-8\n"
    "\n"
    "<p>HTML body</p>\n"
    "--inner--\n"
    "\n"
    "--outer\n"
    'Content-Type: application/pdf; name="report.pdf"\n'
    'Content-Disposition: attachment; filename="report.pdf"\n'
    "Content-Transfer-Encoding: base64\n"
    "\n"
    "JVBERi0xLjQK\n"
    "--outer--\n"
    "epilogue\n"
)


class TestStructure:
    """Header/body split, parameters and boundaries."""

    def test_split_message(self):
        assert MimeDecoder.split_message("A: 1\nB: 2\n\nbody\n") == ("A: 1\nB: 2", "body\n")

    def test_split_message_crlf(self):
        assert MimeDecoder.split_message("A: 1\r\n\r\nbody") == ("A: 1", "body")

    def test_split_without_headers(self):
        assert MimeDecoder.split_message("\nbody only") == ("", "body only")

    def test_split_without_separator(self):
        assert MimeDecoder.split_message("A: 1\nB: 2") is None

    def test_parse_message_without_body(self):
        headers, body = MimeDecoder.parse_message("Subject: only headers\n")
        assert headers.get("Subject") == "only headers"
        assert body == ""

    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ('multipart/mixed; boundary="abc 123"', "abc 123"),
            ("multipart/mixed; boundary=abc; charset=x", "abc"),
            ("multipart/mixed; BOUNDARY=xyz", "xyz"),
            ("multipart/mixed;\n boundary=\"==_Part_1\"", "==_Part_1"),
            ("multipart/mixed; boundary='single'", "single"),
            ("multipart/mixed", None),
            ('multipart/mixed; boundary=""', None),
        ],
    )
    def test_extract_boundary(self, content_type, expected):
        assert MimeDecoder.extract_boundary(content_type) == expected

    def test_header_param(self):
        value = 'text/plain; charset="ISO-8859-1"; format=flowed'
        assert MimeDecoder.header_param(value, "charset") == "ISO-8859-1"
        assert MimeDecoder.header_param(value, "format") == "flowed"
        assert MimeDecoder.header_param(value, "delsp") is None

    def test_header_param_does_not_match_suffix(self):
        value = 'attachment; filename="a.txt"'
        assert MimeDecoder.header_param(value, "name") is None
        assert MimeDecoder.header_param(value, "filename") == "a.txt"

    def test_mime_type(self):
        assert MimeDecoder.mime_type("Text/HTML; charset=utf-8") == "text/html"
        assert MimeDecoder.mime_type(None) == ""


class TestTransferEncodings:
    """quoted-printable and base64."""

    def test_quoted_printable_round_trip(self):
        original = "Grüße aus Köln! " * 10 + "1 + 1 = 2, and a tab\there."
        encoded = quopri.encodestring(original.encode("utf-8")).decode("ascii")
        assert "=\n" in encoded
        assert MimeDecoder.decode_quoted_printable(encoded).decode("utf-8") == original

    def test_quoted_printable_escapes(self):
        assert MimeDecoder.decode_quoted_printable("Hello=20World=\nagain=3D") == b"Hello Worldagain="

    def test_quoted_printable_crlf_soft_break(self):
        assert MimeDecoder.decode_quoted_printable("abc=\r\ndef") == b"abcdef"

    def test_base64_with_line_breaks(self):
        assert MimeDecoder.decode_base64("SGVs\nbG8g\r\nV29y\nbGQ=\n") == b"Hello World"

    def test_base64_ignores_junk(self):
        assert MimeDecoder.decode_base64("SGVs*bG8!") == b"Hello"

    def test_base64_missing_padding(self):
        assert MimeDecoder.decode_base64("SGVsbG8") == b"Hello"

    def test_base64_round_trip(self):
        data = bytes(range(256)) * 3
        encoded = base64.encodebytes(data).decode("ascii")
        assert MimeDecoder.decode_base64(encoded) == data

    @pytest.mark.parametrize("encoding", [None, "7bit", "8bit", "binary", "x-unknown"])
    def test_identity_encodings(self, encoding):
        assert MimeDecoder.decode_transfer("plain ü", encoding) == "plain ü".encode("utf-8")

    def test_encoding_name_is_case_insensitive(self):
        assert MimeDecoder.decode_transfer("SGk=", " Base64 ") == b"Hi"

    @pytest.mark.parametrize("encoding", [None, "8bit", "binary"])
    def test_identity_keeps_latin1_source_bytes(self, encoding):
        text = b"caf\xe9 \xff".decode("latin-1")
        assert MimeDecoder.decode_transfer(text, encoding, "latin-1") == b"caf\xe9 \xff"

    def test_quoted_printable_keeps_latin1_literals(self):
        text = b"caf\xe9=3D cr=E8me".decode("latin-1")
        assert MimeDecoder.decode_quoted_printable(text, "latin-1") == b"caf\xe9= cr\xe8me"

    def test_unrepresentable_text_falls_back_to_utf8(self):
        assert MimeDecoder.decode_transfer("\u2603", None, "latin-1") == "\u2603".encode("utf-8")

    def test_source_encoding_reaches_nested_parts(self):
        raw = (
            'Content-Type: multipart/mixed; boundary="o"\n\n'
            '--o\nContent-Type: multipart/alternative; boundary="i"\n\n'
            "--i\nContent-Type: text/plain; charset=iso-8859-1\nContent-Transfer-Encoding: 8bit\n\n\xe9t\xe9\n--i--\n"
            "--o--\n"
        )
        part = MimeDecoder.decode(raw, "latin-1")[0]
        assert part.payload == b"\xe9t\xe9"
        assert part.text() == "\xe9t\xe9"


class TestDecode:
    """Whole-message decoding."""

    def test_nested_multipart_is_flattened(self):
        parts = MimeDecoder.decode(NESTED_MESSAGE)
        assert [p.content_type for p in parts] == ["text/plain", "text/html", "application/pdf"]
        assert parts[0].text() == "Plain body"
        assert parts[1].text() == "<p>HTML body</p>"
        assert parts[2].payload == b"%PDF-1.4\n"
        assert parts[2].header("content-disposition") == 'attachment; filename="report.pdf"'

    def test_single_part_message(self):
        raw = "Subject: hi\nContent-Transfer-Encoding: quoted-printable\n\nCaf=C3=A9\n"
        parts = MimeDecoder.decode(raw)
        assert len(parts) == 1
        assert parts[0].content_type == "text/plain"
        assert parts[0].text() == "Café\n"

    def test_missing_boundary_yields_no_parts(self):
        raw = "Content-Type: multipart/mixed\n\n--x\nContent-Type: text/plain\n\nhi\n--x--\n"
        assert MimeDecoder.decode(raw) == []

    def test_part_without_separator_is_skipped(self):
        raw = (
            'Content-Type: multipart/mixed; boundary="b"\n\n'
            "--b\nContent-Type: text/plain\n"
            "--b\nContent-Type: text/plain\n\nkept\n"
            "--b--\n"
        )
        parts = MimeDecoder.decode(raw)
        assert [p.text() for p in parts] == ["kept"]

    def test_part_without_headers_defaults_to_text_plain(self):
        raw = 'Content-Type: multipart/mixed; boundary="b"\n\n--b\n\nno headers here\n--b--\n'
        parts = MimeDecoder.decode(raw)
        assert len(parts) == 1
        assert parts[0].content_type == "text/plain"
        assert parts[0].text() == "no headers here"

    def test_crlf_multipart(self):
        raw = NESTED_MESSAGE.replace("\n", "\r\n")
        parts = MimeDecoder.decode(raw)
        assert [p.content_type for p in parts] == ["text/plain", "text/html", "application/pdf"]
        assert parts[0].text() == "Plain body"
        assert parts[2].payload == b"%PDF-1.4\n"

    def test_charset_is_honoured(self):
        raw = (
            'Content-Type: multipart/alternative; boundary="b"\n\n'
            "--b\nContent-Type: text/plain; charset=iso-8859-1\n"
            "Content-Transfer-Encoding: quoted-printable\n\nCaf=E9\n--b--\n"
        )
        part = MimeDecoder.decode(raw)[0]
        assert part.charset == "iso-8859-1"
        assert part.text() == "Café"

    def test_depth_limit(self):
        raw = 'Content-Type: multipart/mixed; boundary="lvl0x"\n\n'
        for level in range(1, 12):
            raw += f'--lvl{level - 1}x\nContent-Type: multipart/mixed; boundary="lvl{level}x"\n\n'
        raw += "--lvl11x\nContent-Type: text/plain\n\ndeep\n"
        assert MimeDecoder.decode(raw) == []
