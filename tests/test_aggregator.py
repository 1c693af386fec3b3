from site_harvest.aggregator import analyze_structure, section_of


def test_analyze_structure_counts_first_segment():
    urls = [
        "https://site.test/",
        "https://site.test/products/a",
        "https://site.test/products/b/",
        "https://site.test/blog/2024/post",
        "https://site.test/products",
        "https://site.test",
    ]

    structure = analyze_structure(urls)

    assert structure.total_urls == 6
    assert structure.urls == urls
    assert structure.sections == {"/": 2, "/products/": 3, "/blog/": 1}
    assert list(structure.sections) == ["/", "/products/", "/blog/"]


def test_invalid_urls_count_in_total_but_not_in_sections():
    structure = analyze_structure(["not-a-url", "https://site.test/a/b"])
    assert structure.total_urls == 2
    assert structure.urls == ["not-a-url", "https://site.test/a/b"]
    assert structure.sections == {"/a/": 1}
    assert section_of("not-a-url") is None


def test_manifest_format():
    structure = analyze_structure(["https://site.test/x/1"])
    data = structure.to_dict()
    assert data == {"totalUrls": 1, "urls": ["https://site.test/x/1"], "sections": {"/x/": 1}}
    data["urls"].append("https://site.test/y")
    assert structure.urls == ["https://site.test/x/1"]
