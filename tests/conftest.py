import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# 8-byte PNG signature
PNG_BASE64 = "iVBORw0KGgo="

BLOGGER_XML = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005' xmlns:thr='http://purl.org/syndication/thread/1.0'>
  <id>tag:blogger.com,1999:blog-123</id>
  <title type='text'>Example Blog</title>
  <entry>
    <id>tag:blogger.com,1999:blog-123.settings.BLOG_NAME</id>
    <category scheme='http://schemas.google.com/g/2005#kind' term='http://schemas.google.com/blogger/2008/kind#settings'/>
    <title type='text'>Blog name</title>
    <content type='text'>Example Blog</content>
  </entry>
  <entry>
    <id>tag:blogger.com,1999:blog-123.post-1001</id>
    <published>2012-03-04T10:00:00.000-08:00</published>
    <category scheme='http://schemas.google.com/g/2005#kind' term='http://schemas.google.com/blogger/2008/kind#post'/>
    <category scheme='http://www.blogger.com/atom/ns#' term='python'/>
    <category scheme='http://www.blogger.com/atom/ns#' term='blogging'/>
    <category scheme='http://www.blogger.com/atom/ns#' term='python'/>
    <title type='text'>Hello World</title>
    <content type='html'>&lt;p&gt;First &lt;b&gt;post&lt;/b&gt;&lt;/p&gt;</content>
    <link rel='replies' type='text/html' href='http://example.blogspot.com/2012/03/hello-world.html#comment-form' title='2 Comments'/>
    <link rel='alternate' type='text/html' href='http://example.blogspot.com/2012/03/hello-world.html' title='Hello World'/>
    <author><name>Alice</name></author>
  </entry>
  <entry>
    <id>tag:blogger.com,1999:blog-123.post-1002</id>
    <published>2012-04-01T09:00:00.000-07:00</published>
    <category scheme='http://schemas.google.com/g/2005#kind' term='http://schemas.google.com/blogger/2008/kind#post'/>
    <title type='text'>Don't Publish Yet</title>
    <content type='html'>&lt;p&gt;Work in progress&lt;/p&gt;</content>
    <author><name>Alice</name></author>
    <app:control xmlns:app='http://purl.org/atom/app#'><app:draft>yes</app:draft></app:control>
  </entry>
  <entry>
    <id>tag:blogger.com,1999:blog-123.post-5001</id>
    <published>2012-03-05T08:30:00.000-08:00</published>
    <category scheme='http://schemas.google.com/g/2005#kind' term='http://schemas.google.com/blogger/2008/kind#comment'/>
    <title type='text'>Nice post</title>
    <content type='html'>Nice &lt;i&gt;post&lt;/i&gt;!</content>
    <author><name>Bob</name><uri>http://bob.example.com</uri><email>bob@example.com</email></author>
    <thr:in-reply-to href='http://example.blogspot.com/2012/03/hello-world.html' ref='tag:blogger.com,1999:blog-123.post-1001' source='http://www.blogger.com/feeds/123/posts/default/1001' type='text/html'/>
  </entry>
  <entry>
    <id>tag:blogger.com,1999:blog-123.post-5002</id>
    <published>2012-03-06T08:30:00.000-08:00</published>
    <category scheme='http://schemas.google.com/g/2005#kind' term='http://schemas.google.com/blogger/2008/kind#comment'/>
    <title type='text'>Thanks</title>
    <content type='html'>Thanks Bob</content>
    <author><name>Alice</name><email>noreply@blogger.com</email></author>
    <thr:in-reply-to href='http://example.blogspot.com/2012/03/hello-world.html' ref='tag:blogger.com,1999:blog-123.post-1001' source='http://www.blogger.com/feeds/123/posts/default/1001' type='text/html'/>
  </entry>
  <entry>
    <id>tag:blogger.com,1999:blog-123.post-5003</id>
    <published>2012-03-07T08:30:00.000-08:00</published>
    <title type='text'>Lost</title>
    <content type='html'>Nobody home</content>
    <author><name>Eve</name></author>
    <thr:in-reply-to ref='tag:blogger.com,1999:blog-123.post-9999' source='http://www.blogger.com/feeds/123/posts/default/9999' type='text/html'/>
  </entry>
</feed>
"""

WORDPRESS_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<rss version="2.0"
  xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"
  xmlns:content="http://purl.org/rss/1.0/modules/content/"
  xmlns:dc="http://purl.org/dc/elements/1.1/"
  xmlns:wp="http://wordpress.org/export/1.2/">
<channel>
  <title>Example WordPress</title>
  <item>
    <title>Hello World</title>
    <pubDate>Mon, 05 Mar 2012 10:00:00 +0000</pubDate>
    <category domain="category" nicename="python"><![CDATA[Python]]></category>
    <category domain="post_tag" nicename="tips"><![CDATA[Tips]]></category>
    <category domain="category" nicename="python"><![CDATA[Python]]></category>
    <content:encoded><![CDATA[<p>Hello <em>there</em></p><p><img src="data:image/png;base64,""" + PNG_BASE64 + """" /></p>]]></content:encoded>
    <wp:post_id>10</wp:post_id>
    <wp:post_date>2012-03-05 10:00:00</wp:post_date>
    <wp:post_name>hello-world</wp:post_name>
    <wp:status>publish</wp:status>
    <wp:comment>
      <wp:comment_id>1</wp:comment_id>
      <wp:comment_author><![CDATA[Bob]]></wp:comment_author>
      <wp:comment_author_email>bob@example.com</wp:comment_author_email>
      <wp:comment_author_url>http://bob.example.com</wp:comment_author_url>
      <wp:comment_date>2012-03-06 08:30:00</wp:comment_date>
      <wp:comment_content><![CDATA[Great <strong>read</strong>]]></wp:comment_content>
      <wp:comment_approved>1</wp:comment_approved>
    </wp:comment>
    <wp:comment>
      <wp:comment_id>2</wp:comment_id>
      <wp:comment_author><![CDATA[Spammer]]></wp:comment_author>
      <wp:comment_date>2012-03-06 09:00:00</wp:comment_date>
      <wp:comment_content><![CDATA[Buy now]]></wp:comment_content>
      <wp:comment_approved>spam</wp:comment_approved>
    </wp:comment>
    <wp:comment>
      <wp:comment_id>3</wp:comment_id>
      <wp:comment_author><![CDATA[Carol]]></wp:comment_author>
      <wp:comment_date>2012-03-07 11:00:00</wp:comment_date>
      <wp:comment_content><![CDATA[Agreed]]></wp:comment_content>
      <wp:comment_approved>1</wp:comment_approved>
    </wp:comment>
  </item>
  <item>
    <title>It's a draft</title>
    <pubDate>Mon, 30 Nov -0001 00:00:00 +0000</pubDate>
    <content:encoded><![CDATA[Line one

Line two]]></content:encoded>
    <wp:post_id>11</wp:post_id>
    <wp:post_date>2012-04-01 09:00:00</wp:post_date>
    <wp:post_name></wp:post_name>
    <wp:status>draft</wp:status>
  </item>
  <item>
    <title>Secret</title>
    <content:encoded><![CDATA[<p>Hidden</p>]]></content:encoded>
    <wp:post_id>12</wp:post_id>
    <wp:post_name>secret</wp:post_name>
    <wp:status>private</wp:status>
  </item>
  <item>
    <title>photo</title>
    <content:encoded><![CDATA[]]></content:encoded>
    <wp:post_id>13</wp:post_id>
    <wp:post_name>photo</wp:post_name>
    <wp:status>inherit</wp:status>
  </item>
</channel>
</rss>
"""


class RecordingImageHandler:
    """Stands in for ImageHandler and records what would have been written."""

    def __init__(self):
        self.saved = []
        self.downloads = []

    def save_base64(self, payload, dest):
        self.saved.append((payload, Path(dest)))

    def download(self, url, dest):
        self.downloads.append((url, Path(dest)))


@pytest.fixture
def image_handler():
    return RecordingImageHandler()


@pytest.fixture
def blogger_file(tmp_path):
    path = tmp_path / "blogger.xml"
    path.write_text(BLOGGER_XML, encoding="utf-8")
    return path


@pytest.fixture
def wordpress_file(tmp_path):
    path = tmp_path / "wordpress.xml"
    path.write_text(WORDPRESS_XML, encoding="utf-8")
    return path
