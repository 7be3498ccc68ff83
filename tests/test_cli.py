"""Terminal output of the menu search client."""

from cli_menu import pretty_print_response


def test_pretty_print_lists_scored_results(capsys):
    payload = {
        "category": "All",
        "took_ms": 0.42,
        "results": [
            {"name": "Chicken Biryani", "price": 220.0, "categories": ["Biryani"], "relevanceScore": 900},
        ],
    }

    pretty_print_response("biryani", payload)

    out = capsys.readouterr().out
    assert "Query: biryani | category: All" in out
    assert "01. score= 900 | Chicken Biryani | ₹220 | Biryani" in out
