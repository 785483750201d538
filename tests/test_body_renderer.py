"""
Tests for mboxcore.mbox.body_renderer.BodyRenderer.
"""
from mboxcore.mbox.body_renderer import BodyRenderer
from mboxcore.models import RenderSource


def _alternative(plain="Plain body", html="<p>HTML body</p>"):
    parts = []
    if plain is not None:
        parts.append(f"--b\nContent-Type: text/plain; charset=utf-8\n\n{plain}\n")
    if html is not None:
        parts.append(f"--b\nContent-Type: text/html; charset=utf-8\n\n{html}\n")
    return 'Subject: x\nContent-Type: multipart/alternative; boundary="b"\n\n' + "".join(parts) + "--b--\n"


class TestPartSelection:
    """Which part ends up in the document."""

    def test_html_part_preferred(self):
        rendered = BodyRenderer().render(_alternative())
        assert rendered.source == RenderSource.HTML
        assert "<p>HTML body</p>" in rendered.markup
        assert "Plain body" not in rendered.markup

    def test_plain_part_when_no_html(self):
        rendered = BodyRenderer().render(_alternative(plain="1 < 2 & 3 > 2", html=None))
        assert rendered.source == RenderSource.PLAIN
        assert "<pre>1 &lt; 2 &amp; 3 &gt; 2</pre>" in rendered.markup

    def test_fallback_to_raw_body(self):
        raw = (
            'Content-Type: multipart/mixed; boundary="b"\n\n'
            "--b\nContent-Type: image/png\nContent-Transfer-Encoding: base64\n\niVBORw0KGgo=\n--b--\n"
        )
        rendered = BodyRenderer().render(raw)
        assert rendered.source == RenderSource.FALLBACK
        assert "iVBORw0KGgo=" in rendered.markup

    def test_missing_boundary_falls_back_escaped(self):
        raw = "Content-Type: multipart/mixed\n\n<b>raw</b>\n"
        rendered = BodyRenderer().render(raw)
        assert rendered.source == RenderSource.FALLBACK
        assert "&lt;b&gt;raw&lt;/b&gt;" in rendered.markup

    def test_single_part_html(self):
        raw = "Content-Type: text/html; charset=utf-8\n\n<h1>Hi</h1>\n"
        rendered = BodyRenderer().render(raw)
        assert rendered.source == RenderSource.HTML
        assert "<h1>Hi</h1>" in rendered.markup

    def test_single_part_without_content_type_is_plain(self):
        rendered = BodyRenderer().render("Subject: x\n\nHello <world>\n")
        assert rendered.source == RenderSource.PLAIN
        assert "Hello &lt;world&gt;" in rendered.markup

    def test_other_single_part_types_render_as_plain(self):
        rendered = BodyRenderer().render("Content-Type: application/json\n\n{\"a\": 1}\n")
        assert rendered.source == RenderSource.PLAIN

    def test_quoted_printable_latin1_body(self):
        raw = (
            "Content-Type: text/plain; charset=iso-8859-1\n"
            "Content-Transfer-Encoding: quoted-printable\n\n"
            "Caf=E9 cr=E8me=\n br=FBl=E9e\n"
        )
        rendered = BodyRenderer().render(raw)
        assert "Café crème brûlée" in rendered.markup

    def test_base64_html_part(self):
        raw = _alternative(plain=None, html="PGI+Ym9sZDwvYj4=").replace(
            "Content-Type: text/html; charset=utf-8\n",
            "Content-Type: text/html; charset=utf-8\nContent-Transfer-Encoding: base64\n",
        )
        rendered = BodyRenderer().render(raw)
        assert "<b>bold</b>" in rendered.markup


class TestDocument:
    """The wrapping template."""

    def test_document_is_script_free(self):
        markup = BodyRenderer().render(_alternative()).markup
        assert markup.startswith("<!DOCTYPE html>")
        assert "Content-Security-Policy" in markup
        assert "default-src 'none'" in markup
        assert "<script" not in markup.lower()

    def test_custom_template(self):
        renderer = BodyRenderer(template="<main>${content}</main>")
        rendered = renderer.render("Subject: x\n\nhi\n")
        assert rendered.markup == "<main><pre>hi\n</pre></main>"

    def test_dollar_signs_in_content_survive(self):
        rendered = BodyRenderer().render("Subject: x\n\nPrice: $content and $5\n")
        assert "Price: $content and $5" in rendered.markup
