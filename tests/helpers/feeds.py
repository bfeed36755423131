"""Inline feed documents used across the test suite."""

from xml.sax.saxutils import escape

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Remote Jobs</title>
    <link>https://remoteok.io</link>
    <description>Remote freelance jobs</description>
    <item>
      <title>Senior Python Developer</title>
      <link>https://remoteok.io/remote-jobs/1001</link>
      <description>&lt;p&gt;Build &amp;amp; maintain &lt;b&gt;data pipelines&lt;/b&gt;.&lt;/p&gt;</description>
      <dc:creator>Acme Corp</dc:creator>
      <pubDate>Fri, 16 Oct 2026 09:30:00 GMT</pubDate>
    </item>
    <item>
      <title>Frontend Engineer</title>
      <link>https://remoteok.io/remote-jobs/1002</link>
      <description>React and TypeScript</description>
      <pubDate>Sat, 17 Oct 2026 12:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

EMPTY_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Quiet Board</title>
    <link>https://quiet.example.com</link>
    <description>No jobs today</description>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Remote Board</title>
  <id>urn:uuid:remote-board</id>
  <updated>2026-10-17T10:00:00Z</updated>
  <entry>
    <title>Data Engineer</title>
    <id>urn:uuid:job-1</id>
    <link href="https://board.example.com/jobs/1"/>
    <updated>2026-10-17T10:00:00Z</updated>
    <author><name>Globex</name></author>
    <summary type="html">&lt;p&gt;Airflow &amp;amp; dbt&lt;/p&gt;</summary>
  </entry>
</feed>
"""

SPARSE_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Sparse</title>
    <link>https://sparse.example.com</link>
    <description>Items with missing fields</description>
    <item>
      <title>R&amp;D Engineer &#8211; Remote</title>
      <content:encoded><![CDATA[<p>Full body</p>]]></content:encoded>
    </item>
    <item></item>
  </channel>
</rss>
"""


def rss_feed(items, title="Generated Feed"):
    """Build an RSS 2.0 document.

    Args:
        items: Iterable of dicts with optional title, link, description,
            author and pub_date keys
        title: Channel title

    Returns:
        Feed document as a string
    """
    parts = []
    for item in items:
        fields = []
        if "title" in item:
            fields.append(f"<title>{escape(item['title'])}</title>")
        if "link" in item:
            fields.append(f"<link>{escape(item['link'])}</link>")
        if "description" in item:
            fields.append(f"<description>{escape(item['description'])}</description>")
        if "author" in item:
            fields.append(f"<dc:creator>{escape(item['author'])}</dc:creator>")
        if "pub_date" in item:
            fields.append(f"<pubDate>{item['pub_date']}</pubDate>")
        parts.append(f"<item>{''.join(fields)}</item>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/"><channel>'
        f"<title>{escape(title)}</title><link>https://feeds.example.com</link>"
        "<description>Generated</description>"
        f"{''.join(parts)}</channel></rss>"
    )
