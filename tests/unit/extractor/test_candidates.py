"""
Unit tests for candidate ranking, refinement and sibling gathering.
"""

import pytest

from decruft.dom import TreeAdapter, parse_html
from decruft.extractor.candidates import CONTENT_ID, CandidateSelector, Selection
from decruft.extractor.models import Candidate
from decruft.extractor.scoring import ScoringEngine
from decruft.extractor.state import AnalysisState, ExtractionFlags


def _selector(soup, n_top_candidates=5):
    dom = TreeAdapter(soup)
    state = AnalysisState()
    scoring = ScoringEngine(dom, state, ExtractionFlags(weight_classes=False))
    return CandidateSelector(dom, state, scoring, n_top_candidates)


def _score(selector, node, value):
    selector.state.get(node).initialized = True
    selector.state.set_score(node, value)


class TestRank:
    """Top-N ranking by link-density weighted score."""

    def test_scores_are_weighted_by_link_density(self):
        """Half-linked text halves the score."""
        soup = parse_html("<html><body><div id='a'>abcd<a href='#'>efgh</a></div><div id='b'>words</div></body></html>")
        selector = _selector(soup)
        a, b = soup.find(id="a"), soup.find(id="b")
        _score(selector, a, 10)
        _score(selector, b, 8)

        top = selector.rank([a, b])

        assert [c.element.get("id") for c in top] == ["b", "a"]
        assert top[1].score == pytest.approx(5)
        assert top[1].link_density == pytest.approx(0.5)
        assert selector.state.score(a) == pytest.approx(5)

    def test_keeps_only_n_best_with_ties_in_discovery_order(self):
        """Equal scores keep their first-seen order; the rest is cut."""
        soup = parse_html("<html><body>" + "".join(f"<div id='d{i}'>x</div>" for i in range(4)) + "</body></html>")
        selector = _selector(soup, n_top_candidates=3)
        nodes = soup.find_all("div")
        for node, value in zip(nodes, (5, 7, 7, 1)):
            _score(selector, node, value)

        top = selector.rank(nodes)

        assert [c.element.get("id") for c in top] == ["d1", "d2", "d0"]


class TestSelect:
    """Picking and refining the top candidate."""

    def test_no_candidates_wraps_page_contents(self):
        """Without candidates every page child moves into a new div."""
        soup = parse_html("<html><body>loose text<span>inline</span></body></html>")
        selector = _selector(soup)

        selection = selector.select(soup.body, [])

        container = selection.top_candidate
        assert selection.created
        assert container.name == "div"
        assert container.parent is soup.body
        assert soup.body.contents == [container]
        assert container.get_text() == "loose textinline"
        assert selector.state.is_initialized(container)

    def test_body_as_best_candidate_also_wraps(self):
        """A BODY top candidate takes the fallback path."""
        soup = parse_html("<html><body><p>text</p></body></html>")
        selector = _selector(soup)
        _score(selector, soup.body, 50)

        selection = selector.select(soup.body, [Candidate(soup.body, 50, 0)])

        assert selection.created
        assert selection.top_candidate.find("p") is not None

    def _shared_ancestor_page(self):
        html = """
        <html><body><div id="wrap">
          <div id="best"><p>one</p></div>
          <div id="alt1"><p>two</p></div>
          <div id="alt2"><p>three</p></div>
          <div id="alt3"><p>four</p></div>
        </div></body></html>
        """
        soup = parse_html(html)
        selector = _selector(soup)
        ids = ("best", "alt1", "alt2", "alt3")
        for node_id in ids:
            _score(selector, soup.find(id=node_id), 100)
        return soup, selector, [soup.find(id=node_id) for node_id in ids]

    def test_shared_ancestor_of_three_alternatives_is_promoted(self):
        """Three close alternatives under one ancestor promote it."""
        soup, selector, nodes = self._shared_ancestor_page()
        top = [Candidate(nodes[0], 100, 0)] + [Candidate(node, 80, 0) for node in nodes[1:]]

        selection = selector.select(soup.body, top)

        assert selection.top_candidate is soup.find(id="wrap")
        assert not selection.created

    def test_two_alternatives_are_not_enough(self):
        """Fewer than three alternatives keeps the best candidate."""
        soup, selector, nodes = self._shared_ancestor_page()
        top = [Candidate(nodes[0], 100, 0), Candidate(nodes[1], 80, 0), Candidate(nodes[2], 80, 0)]

        selection = selector.select(soup.body, top)

        assert selection.top_candidate is nodes[0]
        assert selection.parent is soup.find(id="wrap")

    def test_weak_alternatives_do_not_count(self):
        """Alternatives under 75% of the best score are ignored."""
        soup, selector, nodes = self._shared_ancestor_page()
        top = [Candidate(nodes[0], 100, 0)] + [Candidate(node, 74, 0) for node in nodes[1:]]

        selection = selector.select(soup.body, top)

        assert selection.top_candidate is nodes[0]

    def test_climbs_to_strictly_better_parent(self):
        """A parent scoring higher than the child becomes the top candidate."""
        soup = parse_html(
            "<html><body><div id='outer'><div id='inner'><p>a</p></div><p>b</p></div><p>c</p></body></html>"
        )
        selector = _selector(soup)
        inner, outer = soup.find(id="inner"), soup.find(id="outer")
        _score(selector, inner, 30)
        _score(selector, outer, 31)

        selection = selector.select(soup.body, [Candidate(inner, 30, 0)])

        assert selection.top_candidate is outer

    def test_equal_parent_stops_the_climb(self):
        """A parent scoring the same as the child does not win."""
        soup = parse_html(
            "<html><body><div id='outer'><div id='inner'><p>a</p></div><p>b</p></div><p>c</p></body></html>"
        )
        selector = _selector(soup)
        inner, outer = soup.find(id="inner"), soup.find(id="outer")
        _score(selector, inner, 30)
        _score(selector, outer, 30)

        selection = selector.select(soup.body, [Candidate(inner, 30, 0)])

        assert selection.top_candidate is inner

    def test_only_children_collapse_upwards(self):
        """A top candidate that is an only child is replaced by its parent."""
        soup = parse_html("<html><body><section id='s'><div id='d'><p>x</p></div></section><p>y</p></body></html>")
        selector = _selector(soup)
        div = soup.find(id="d")
        _score(selector, div, 40)

        selection = selector.select(soup.body, [Candidate(div, 40, 0)])

        assert selection.top_candidate is soup.find(id="s")
        assert selection.parent is soup.body


class TestGather:
    """Sibling inclusion into the article container."""

    def setup_method(self):
        long_text = "This sentence is long enough to count as real content for the reader. " * 2
        html = f"""
        <html><body><div id="parent">
          <div id="top" class="story">top</div>
          <div id="equal">at threshold</div>
          <div id="above">above threshold</div>
          <div id="same-class" class="story">same class</div>
          <p id="long">{long_text}</p>
          <p id="short">Short but a sentence. </p>
          <p id="no-sentence">no period here</p>
          <p id="linked"><a href="#">Short. </a></p>
          <span id="span-above">inline</span>
        </div></body></html>
        """
        self.soup = parse_html(html)
        self.selector = _selector(self.soup)
        find = self.soup.find
        _score(self.selector, find(id="top"), 100)
        _score(self.selector, find(id="equal"), 20)
        _score(self.selector, find(id="above"), 20.5)
        _score(self.selector, find(id="same-class"), 1)
        _score(self.selector, find(id="span-above"), 50)
        self.article = self.selector.gather(Selection(top_candidate=find(id="top"), parent=find(id="parent")))

    def _included(self):
        return [child.get("id") for child in self.article.find_all(recursive=False)]

    def test_container_id(self):
        """The container is a fresh div with the content id."""
        assert self.article.name == "div"
        assert self.article.get("id") == CONTENT_ID

    def test_included_siblings_in_document_order(self):
        """Threshold is strict; class bonus and paragraph rules apply."""
        assert self._included() == ["top", "above", "same-class", "long", "short", "span-above"]

    def test_excluded_siblings_stay_behind(self):
        """Rejected siblings remain under the original parent."""
        remaining = [child.get("id") for child in self.soup.find(id="parent").find_all(recursive=False)]
        assert remaining == ["equal", "no-sentence", "linked"]

    def test_non_block_siblings_become_divs(self):
        """An included span is renamed so later cleaning keeps it."""
        assert self.article.find(id="span-above").name == "div"
        assert self.article.find(id="long").name == "p"

    def test_direction_from_parent(self):
        """dir is read from the candidate's surroundings."""
        soup = parse_html("<html dir='rtl'><body><div id='p'><div id='t'>x</div></div></body></html>")
        selector = _selector(soup)
        selection = Selection(top_candidate=soup.find(id="t"), parent=soup.find(id="p"))
        assert selector.direction(selection) == "rtl"
