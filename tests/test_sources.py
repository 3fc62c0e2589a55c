from __future__ import annotations

from conftest import FakeFetcher

from lead_crawler.models import LeadSource
from lead_crawler.sources import (
    BingSearchSource,
    GoogleSearchSource,
    MapsListingSource,
    SocialBioSource,
    VideoChannelSource,
    clean_title,
)
from lead_crawler.sources.base import unwrap_redirect
from lead_crawler.sources.social_bio import infer_role

GOOGLE_PAGE = """
<div id="search">
  <div class="g">
    <a href="/url?q=https://smiledental.com/&amp;sa=U"><h3>Smile Dental | Austin Dentist</h3></a>
    <div class="VwiC3b">Family dentistry in the heart of Austin.</div>
  </div>
  <div class="g">
    <a href="https://www.yelp.com/biz/best-dentists"><h3>Best Dentists in Austin - Yelp</h3></a>
  </div>
  <div class="g">
    <a href="https://bright-smiles.com/"><h3>Bright-Smiles Clinic - Home</h3></a>
  </div>
  <div class="g"><span>Ad block without a heading</span></div>
</div>
"""

BING_PAGE = """
<ol id="b_results">
  <li class="b_algo">
    <h2><a href="https://acme-plumbing.com/">Acme Plumbing :: Denver</a></h2>
    <div class="b_caption"><p>24/7 emergency plumbing across Denver.</p></div>
  </li>
  <li class="b_algo"><h2><a href="https://www.facebook.com/acmeplumbing">Acme Plumbing on Facebook</a></h2></li>
  <li class="b_algo"><h2><a href="https://pipes.example.net/">Pipe Pros</a></h2></li>
</ol>
"""

MAPS_PAGE = """
<div role="feed">
  <div role="article" aria-label="Sunrise Bakery">
    <div class="qBF1Pd fontHeadlineSmall">Sunrise Bakery</div>
    <div class="W4Efsd fontBodyMedium">123 Main St, Austin</div>
  </div>
  <div role="article" aria-label="Corner Cafe"></div>
  <div role="article"></div>
</div>
"""

VIDEO_MARKUP_PAGE = """
<ytd-channel-renderer>
  <a id="channel-title" href="/@smiledental">Smile Dental Channel</a>
</ytd-channel-renderer>
<ytd-channel-renderer>
  <a id="channel-title" href="/channel/UC123abc">Austin Smiles</a>
</ytd-channel-renderer>
"""

VIDEO_EMBEDDED_PAGE = (
    '<script>var ytInitialData = {"contents":[{"channelRenderer":{"title":{"simpleText":"Austin Dental Tips"},'
    '"navigationEndpoint":{"commandMetadata":{"webCommandMetadata":{"url":"/@austindentaltips"}}}}},'
    '{"channelRenderer":{"title":{"simpleText":"Gum Health \\u0026 You"},'
    '"navigationEndpoint":{"commandMetadata":{"webCommandMetadata":{"url":"/channel/UCgum"}}}}}]};</script>'
)

TAG_PAGE = '{"users":[{"username":"drjane"},{"username":"nomail"},{"username":"drjane"},{"username":"ceo.sam"}]}'


def test_clean_title_drops_site_suffixes() -> None:
    assert clean_title("Smile Dental | Austin Dentist") == "Smile Dental"
    assert clean_title("Acme Plumbing :: Denver") == "Acme Plumbing"
    assert clean_title("  Bright-Smiles   Clinic - Home ") == "Bright-Smiles Clinic"
    assert clean_title("Plain Name") == "Plain Name"
    assert len(clean_title("x" * 300)) == 100


def test_unwrap_redirect_resolves_search_links() -> None:
    assert unwrap_redirect("/url?q=https://smiledental.com/&sa=U") == "https://smiledental.com/"
    assert unwrap_redirect("https://direct.example.net/") == "https://direct.example.net/"


def test_google_parser_skips_blocked_domains_and_cleans_titles() -> None:
    source = GoogleSearchSource(fetcher=FakeFetcher())

    leads = source.parse_results(GOOGLE_PAGE, limit=10)

    assert [(lead.entity, lead.website) for lead in leads] == [
        ("Smile Dental", "https://smiledental.com/"),
        ("Bright-Smiles Clinic", "https://bright-smiles.com/"),
    ]
    assert leads[0].snippet == "Family dentistry in the heart of Austin."
    assert all(lead.source is LeadSource.GENERAL_SEARCH for lead in leads)
    assert len(source.parse_results(GOOGLE_PAGE, limit=1)) == 1


def test_google_search_fetches_results_page_and_caps_limit() -> None:
    fetcher = FakeFetcher({GoogleSearchSource.SEARCH_URL: GOOGLE_PAGE})
    source = GoogleSearchSource(fetcher=fetcher)

    leads = source.search("dentists", "Austin", 1)

    assert len(leads) == 1
    assert fetcher.calls == [GoogleSearchSource.SEARCH_URL]
    assert source.build_query("dentists", "") == "dentists contact email -linkedin -facebook -yelp"


def test_search_returns_empty_list_when_source_is_unreachable() -> None:
    source = BingSearchSource(fetcher=FakeFetcher())

    assert source.search("plumbers", "Denver", 5) == []
    assert source.search("plumbers", "Denver", 0) == []


def test_bing_parser_reads_caption_snippets() -> None:
    leads = BingSearchSource(fetcher=FakeFetcher()).parse_results(BING_PAGE, limit=10)

    assert [lead.entity for lead in leads] == ["Acme Plumbing", "Pipe Pros"]
    assert leads[0].snippet == "24/7 emergency plumbing across Denver."
    assert leads[1].snippet == ""
    assert all(lead.source is LeadSource.SECONDARY_SEARCH for lead in leads)


def test_blocklist_matches_subdomains_only() -> None:
    source = BingSearchSource(fetcher=FakeFetcher())

    assert source.is_blocked("https://m.facebook.com/acme")
    assert source.is_blocked("not a url")
    assert not source.is_blocked("https://notfacebook.com/")
    assert not source.is_blocked("https://acme-plumbing.com/")


def test_maps_listings_have_no_website() -> None:
    leads = MapsListingSource(fetcher=FakeFetcher()).parse_results(MAPS_PAGE, limit=10)

    assert [(lead.entity, lead.snippet) for lead in leads] == [
        ("Sunrise Bakery", "123 Main St, Austin"),
        ("Corner Cafe", ""),
    ]
    assert all(lead.website == "" and lead.source is LeadSource.MAPS for lead in leads)


def test_video_channels_from_markup_carry_video_profile() -> None:
    leads = VideoChannelSource(fetcher=FakeFetcher()).parse_results(VIDEO_MARKUP_PAGE, limit=10)

    assert [(lead.entity, lead.website) for lead in leads] == [
        ("Smile Dental Channel", "https://www.youtube.com/@smiledental"),
        ("Austin Smiles", "https://www.youtube.com/channel/UC123abc"),
    ]
    assert leads[0].social_profiles == {"video": "https://www.youtube.com/@smiledental"}
    assert all(lead.source is LeadSource.VIDEO for lead in leads)


def test_video_channels_fall_back_to_embedded_data() -> None:
    leads = VideoChannelSource(fetcher=FakeFetcher()).parse_results(VIDEO_EMBEDDED_PAGE, limit=10)

    assert [(lead.entity, lead.website) for lead in leads] == [
        ("Austin Dental Tips", "https://www.youtube.com/@austindentaltips"),
        ("Gum Health & You", "https://www.youtube.com/channel/UCgum"),
    ]


def test_infer_role_maps_bio_keywords() -> None:
    assert infer_role("Founder of Bright Smiles") == "Founder"
    assert infer_role("Chief Technology Officer at Acme") == "CTO"
    assert infer_role("Growth hacker and coffee lover") == "Marketing"
    assert infer_role("Dog mom. Runner.") == "Professional"
    assert infer_role("Concerto pianist") == "Professional"


def test_social_bio_source_keeps_profiles_with_bio_emails() -> None:
    base = SocialBioSource.BASE_URL
    fetcher = FakeFetcher(
        {
            f"{base}/explore/tags/dentalclinics/": TAG_PAGE,
            f"{base}/drjane/": '{"full_name":"Dr Jane Smith","biography":"Founder of Bright Smiles. Email Jane@BrightSmiles.com"}',
            f"{base}/nomail/": '{"full_name":"No Mail","biography":"Just vibes"}',
            f"{base}/ceo.sam/": '<meta property="og:description" content="CEO at Acme. hello@acme.io">',
        }
    )
    pauses = []
    source = SocialBioSource(fetcher=fetcher, batch_size=2, batch_pause_seconds=0.25, sleep=pauses.append)

    leads = source.search("Dental Clinics", "Austin", 5)

    assert [(lead.entity, lead.email, lead.role) for lead in leads] == [
        ("Dr Jane Smith", "jane@brightsmiles.com", "Founder"),
        ("ceo.sam", "hello@acme.io", "CEO"),
    ]
    assert leads[0].social_profiles == {"instagram": f"{base}/drjane/"}
    assert all(lead.source is LeadSource.SOCIAL_BIO for lead in leads)
    assert pauses == [0.25]


def test_social_bio_handle_collection_is_capped() -> None:
    assert SocialBioSource.parse_handles(TAG_PAGE, cap=2) == ["drjane", "nomail"]
    assert SocialBioSource.tag_for("Dental Clinics!") == "dentalclinics"


def test_social_bio_batches_stop_once_limit_is_reached() -> None:
    base = SocialBioSource.BASE_URL
    handles = ["a1", "a2", "a3", "a4"]
    pages = {f"{base}/{handle}/": f'{{"biography":"Owner {handle}@shop.example.net"}}' for handle in handles}
    fetcher = FakeFetcher(pages)
    source = SocialBioSource(fetcher=fetcher, batch_size=2, sleep=lambda _: None)

    leads = source.batched_enrich_handles(handles, limit=1)

    assert [lead.entity for lead in leads] == ["a1"]
    assert len(fetcher.calls) == 2
