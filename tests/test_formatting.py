from guruji.client.formatting import Segment, format_message, segments_to_html


class TestFormatMessage:
    def test_plain_text(self):
        assert format_message("Be like water.") == [Segment("text", "Be like water.")]

    def test_empty_text(self):
        assert format_message("") == []

    def test_link_between_text(self):
        segments = format_message("Read https://example.com/gita today")

        assert segments == [
            Segment("text", "Read "),
            Segment("link", "https://example.com/gita"),
            Segment("text", " today"),
        ]

    def test_multiple_links_and_http(self):
        segments = format_message("http://a.test and https://b.test/x?y=1")

        assert [s.kind for s in segments] == ["link", "text", "link"]
        assert segments[2].text == "https://b.test/x?y=1"

    def test_non_http_schemes_stay_text(self):
        segments = format_message("javascript:alert(1) ftp://files.test")
        assert all(s.kind == "text" for s in segments)


class TestSegmentsToHtml:
    def test_text_is_escaped(self):
        html = segments_to_html(format_message("<b>om</b> & shanti"))
        assert html == "&lt;b&gt;om&lt;/b&gt; &amp; shanti"

    def test_link_opens_safely(self):
        html = segments_to_html(format_message("see https://example.com"))

        assert html == (
            'see <a href="https://example.com" target="_blank" '
            'rel="noopener noreferrer">https://example.com</a>'
        )

    def test_link_attribute_cannot_break_out(self):
        html = segments_to_html(format_message('https://x.test/"onmouseover="evil'))
        assert '"onmouseover' not in html
        assert "&quot;onmouseover=&quot;evil" in html
