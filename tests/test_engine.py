import pytest

from scraped import (
    NULL,
    Array,
    Bool,
    ChildScope,
    ExtractionConfiguration,
    Kind,
    Locator,
    MissingElementError,
    Multiplicity,
    Number,
    ParsedResults,
    String,
    extract,
)


class TestScenarios:

    def test_many_text_headings(self, make_tree, config):
        tree = make_tree("<h2>A</h2><h2>B</h2>")
        config.add_selector("h2", "h2")
        config.add_property("headings", "h2", Kind.text(), Multiplicity.MANY, required=False)

        results = extract(tree, config)

        assert results.to_dict() == {"headings": ["A", "B"]}

    def test_missing_optional_title_is_null(self, make_tree, config):
        tree = make_tree("<html><body><p>no title here</p></body></html>")
        config.add_selector("title", "title")
        config.add_property("title", "title", Kind.text(), Multiplicity.SINGLE, required=False)

        assert extract(tree, config).to_dict() == {"title": None}

    def test_missing_required_title_fails(self, make_tree, config):
        tree = make_tree("<html><body><p>no title here</p></body></html>")
        config.add_selector("title", "title")
        config.add_property("title", "title", Kind.text(), Multiplicity.SINGLE, required=True)

        with pytest.raises(MissingElementError) as exc_info:
            extract(tree, config)
        assert exc_info.value.property_name == "title"

    def test_matched_element_without_attribute_is_null(self, make_tree, config):
        tree = make_tree('<a class="x">no href</a><a class="x" href="/y">y</a>')
        config.add_selector("links", "a.x")
        config.add_property("first_href", "links", Kind.attr("href"))
        config.add_property("hrefs", "links", Kind.attr("href"), Multiplicity.MANY)
        config.add_property("strict", "links", Kind.attr("href"), required=True)

        results = extract(tree, config)

        assert results["first_href"] == NULL
        assert results["hrefs"] == Array([NULL, String("/y")])
        assert results["strict"] == NULL


class TestMultiplicity:

    def test_many_with_zero_matches_is_empty_array(self, make_tree, config):
        config.add_selector("li", "li")
        config.add_property("items", "li", Kind.text(), Multiplicity.MANY)
        assert extract(make_tree("<p>x</p>"), config)["items"] == Array([])

    def test_single_takes_first_in_document_order(self, make_tree, config):
        tree = make_tree("<div><span class='b'>1</span></div><span class='a'>2</span>")
        config.add_selector("spans", ".a, .b")
        config.add_property("first", "spans")
        assert extract(tree, config)["first"] == String("1")

    def test_required_failure_aborts_other_properties(self, make_tree, config):
        tree = make_tree("<h1>present</h1>")
        config.add_selector("h1", "h1").add_selector("h2", "h2")
        config.add_property("heading", "h1")
        config.add_property("sub", "h2", required=True)
        with pytest.raises(MissingElementError):
            extract(tree, config)

    def test_required_many_with_zero_matches_fails(self, make_tree, config):
        config.add_selector("li", "li")
        config.add_property("items", "li", Kind.text(), Multiplicity.MANY, required=True)
        with pytest.raises(MissingElementError):
            extract(make_tree("<p>x</p>"), config)


class TestKinds:

    def test_all_kinds_on_simple_doc(self, simple_tree, config):
        config.add_selector("intro", "p.intro")
        config.add_selector("h2", "h2")
        config.add_selector("images", "img")
        config.add_property("intro_text", "intro", Kind.text())
        config.add_property("intro_html", "intro", Kind.html())
        config.add_property("has_intro", "intro", Kind.exists())
        config.add_property("h2_count", "h2", Kind.count())
        config.add_property("h2_count_many", "h2", Kind.count(), Multiplicity.MANY)
        config.add_property("image_sources", "images", "attr:src", "many")

        results = extract(simple_tree, config)

        assert results["intro_text"] == String("Hello world")
        assert results["intro_html"] == String("Hello <b>world</b>")
        assert results["has_intro"] == Bool(True)
        assert results["h2_count"] == Number(3)
        assert results["h2_count_many"] == Number(3)
        assert results["image_sources"] == Array([String("/img/logo.png"), NULL])

    def test_exists_and_count_with_zero_matches_follow_multiplicity(self, make_tree, config):
        config.add_selector("video", "video")
        config.add_property("has_video", "video", Kind.exists())
        config.add_property("videos", "video", Kind.count(), Multiplicity.MANY)
        results = extract(make_tree("<p>x</p>"), config)
        assert results["has_video"] == NULL
        assert results["videos"] == Array([])


class TestScopes:

    def test_scope_limits_query_to_first_scope_match(self, simple_tree, config):
        config.add_selector("article", "article")
        config.add_selector("headings", "h2", scope="article")
        config.add_property("headings", "headings", Kind.text(), Multiplicity.MANY)

        assert extract(simple_tree, config).to_dict() == {
            "headings": ["First section", "Second section"],
        }

    def test_first_scope_match_wins(self, make_tree, config):
        tree = make_tree("<ul><li>a</li><li>b</li></ul><ul><li>c</li></ul>")
        config.add_selector("list", "ul")
        config.add_selector("items", "li", scope="list")
        config.add_property("items", "items", Kind.text(), Multiplicity.MANY)
        assert extract(tree, config).to_dict() == {"items": ["a", "b"]}

    def test_scope_without_match_means_no_match(self, make_tree, config):
        tree = make_tree("<li>outside</li>")
        config.add_selector("list", "ul")
        config.add_selector("items", "li", scope="list")
        config.add_property("items", "items", Kind.text(), Multiplicity.MANY)
        config.add_property("first", "items")
        assert extract(tree, config).to_dict() == {"items": [], "first": None}

    def test_nested_scopes(self, make_tree, config):
        tree = make_tree(
            "<section><div class='card'><b>one</b></div><div class='card'><b>two</b></div></section>"
            "<b>outside</b>"
        )
        config.add_selector("section", "section")
        config.add_selector("card", ".card", scope="section")
        config.add_selector("bold", "b", scope="card")
        config.add_property("bold", "bold", Kind.text(), Multiplicity.MANY)
        assert extract(tree, config).to_dict() == {"bold": ["one"]}


class TestResults:

    def test_results_are_deterministic(self, simple_tree):
        config = ExtractionConfiguration.generic()
        first = extract(simple_tree, config)
        second = extract(simple_tree, config)
        assert first == second
        assert first.to_json() == second.to_json()

    def test_extract_freezes_configuration(self, simple_tree, config):
        config.add_selector("h1", "h1").add_property("h1", "h1")
        extract(simple_tree, config)
        assert config.frozen

    def test_results_round_trip_through_json(self, simple_tree, locator):
        results = extract(simple_tree, ExtractionConfiguration.generic())
        again = ParsedResults.from_json(results.to_json(), locator)
        assert again == results
        assert again.to_value() == results.to_value()

    def test_property_order_follows_configuration(self, simple_tree):
        results = extract(simple_tree, ExtractionConfiguration.generic())
        assert list(results) == ["h1", "title", "h2", "h3", "links", "images", "scripts", "styles", "meta"]

    def test_unknown_property_raises_key_error(self, simple_tree):
        results = extract(simple_tree, ExtractionConfiguration.generic())
        with pytest.raises(KeyError):
            results.get("nope")
        assert results.get("h1") == String("My Title")
        assert results["h3"] == Array([])

    def test_child_urls(self, simple_tree):
        results = extract(simple_tree, ExtractionConfiguration.generic())
        assert results.child_urls == [
            Locator("https://dev.null/static/site.css"),
            Locator("https://dev.null/about"),
            Locator("https://other.example.org/page"),
        ]


class TestChildScopes:

    @pytest.fixture
    def links_config(self, config):
        return config.add_selector("links", "a[href]")

    def test_relative_only(self, simple_tree, links_config):
        links_config.add_child_selector("links", ChildScope.RELATIVE)
        assert extract(simple_tree, links_config).child_urls == [Locator("https://dev.null/about")]

    def test_absolute_only(self, simple_tree, links_config):
        links_config.add_child_selector("links", "absolute")
        assert extract(simple_tree, links_config).child_urls == [
            Locator("https://other.example.org/page"),
        ]

    def test_protocol_relative_is_absolute_but_not_http(self, make_tree, config):
        tree = make_tree('<a href="//cdn.example.org/x">cdn</a><a href="http://a.example.org/">a</a>')
        config.add_selector("links", "a")
        config.add_selector("same", "a")
        config.add_child_selector("links", ChildScope.ABSOLUTE)
        config.add_child_selector("same", ChildScope.HTTP)
        assert extract(tree, config).child_urls == [
            Locator("https://cdn.example.org/x"),
            Locator("http://a.example.org/"),
        ]

    def test_http_only(self, make_tree, config):
        tree = make_tree('<a href="page.html">p</a><a href="https://x.example.org/">x</a>')
        config.add_selector("links", "a").add_child_selector("links", ChildScope.HTTP)
        assert extract(tree, config).child_urls == [Locator("https://x.example.org/")]
