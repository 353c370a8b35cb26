"""Built-in site profiles for platforms with known article markup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..conversion.repairs import Repair, compose_abstract, promote_lazy_media, remove_nodes


@dataclass(frozen=True)
class SiteProfile:
    """
    Declarative extraction strategy bound to a hostname pattern.

    Attributes:
        name: Short identifier used in logs and results
        host: Substring the request hostname must contain
        title_selectors: CSS selectors tried in order for the title
        content_selectors: CSS selectors tried in order for the article subtree
        repairs: Transformations applied in order to the selected subtree
        path_contains: Optional substring the URL must also contain
    """

    name: str
    host: str
    title_selectors: tuple[str, ...] = ()
    content_selectors: tuple[str, ...] = ()
    repairs: tuple[Repair, ...] = ()
    path_contains: Optional[str] = None

    def matches(self, hostname: str, url: str) -> bool:
        """Check whether this profile applies to a request."""
        if self.host not in hostname.lower():
            return False
        return self.path_contains is None or self.path_contains in url


# Registration order is significant: first match wins. PubMed lives under
# ncbi.nlm.nih.gov, so it must precede the NCBI profiles, and the GEO
# variant must precede the generic NCBI one.
PROFILES: tuple[SiteProfile, ...] = (
    SiteProfile(
        name="wechat",
        host="mp.weixin.qq.com",
        title_selectors=("#activity-name",),
        content_selectors=("#js_content", "#img-content"),
        repairs=(promote_lazy_media,),
    ),
    SiteProfile(
        name="csdn",
        host="blog.csdn.net",
        title_selectors=("#articleContentId",),
        content_selectors=("#content_views",),
        repairs=(
            remove_nodes(".toblog-vip-column-message", ".recommend-box"),
            # Line-number gutters and copy buttons inside code blocks
            remove_nodes("pre .pre-numbering", "pre .hljs-button", "pre .idx-num"),
        ),
    ),
    SiteProfile(
        name="juejin",
        host="juejin.cn",
        title_selectors=(".article-title",),
        content_selectors=(".markdown-body", "article"),
        repairs=(remove_nodes("style", ".copy-code-btn"),),
    ),
    SiteProfile(
        name="nowcoder",
        host="nowcoder.com",
        title_selectors=(".post-title",),
        content_selectors=(".nc-post-content",),
        repairs=(remove_nodes(".company-banner", ".post-topic-des"),),
    ),
    SiteProfile(
        name="pubmed",
        host="pubmed.ncbi.nlm.nih.gov",
        title_selectors=("h1.heading-title",),
        content_selectors=("main", "body", "html"),
        repairs=(compose_abstract,),
    ),
    SiteProfile(
        name="ncbi-geo",
        host="ncbi.nlm.nih.gov",
        path_contains="/geo/",
        title_selectors=("h2", "#rptt"),
        content_selectors=("#maincontent", ".rprt", "body"),
        repairs=(
            remove_nodes(
                ".breadcrumb",
                "#sidebar",
                ".portlet_content .portlet_actions",
                ".search_results_footer",
                "#nc_breadcrumb",
            ),
        ),
    ),
    SiteProfile(
        name="ncbi",
        host="ncbi.nlm.nih.gov",
        title_selectors=("h1",),
        content_selectors=("#maincontent", "main"),
        repairs=(remove_nodes("nav", ".breadcrumb", "#sidebar", "footer"),),
    ),
)


def resolve(
    hostname: str,
    url: str,
    profiles: tuple[SiteProfile, ...] = PROFILES,
) -> Optional[SiteProfile]:
    """
    Find the profile for a request.

    Profiles are scanned in registration order and the first match wins.
    ``None`` is a normal outcome and routes the page to the generic fallback.

    Example:
        >>> resolve("blog.csdn.net", "https://blog.csdn.net/u/article/1").name
        'csdn'
        >>> resolve("example.com", "https://example.com/") is None
        True
    """
    for profile in profiles:
        if profile.matches(hostname, url):
            return profile
    return None
