from linkpro.platforms import DEFAULT_ICON, PLATFORMS, get_platform_by_name, icon_for


def test_lookup_is_case_insensitive():
    assert get_platform_by_name("github").name == "GitHub"
    assert get_platform_by_name("LINKEDIN").base_url == "https://linkedin.com/in/"


def test_unknown_platform():
    assert get_platform_by_name("Mastodon") is None
    assert icon_for("Mastodon") == DEFAULT_ICON


def test_catalog_names_unique():
    names = [p.name.lower() for p in PLATFORMS]
    assert len(names) == len(set(names)) == 8
