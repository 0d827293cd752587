#!/usr/bin/env python3
"""
Blog export to Markdown converter (b2m)

A Python CLI tool for converting Blogger and WordPress backups to Markdown files.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

from blog2md import (BloggerExtractor, ExportParser, HtmlToMarkdown, ImageContext, ImageHandler,
                     OutputWriter, WordPressExtractor)
from blog2md.errors import ExportParseError
from blog2md.image_handler import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT
from blog2md.parser import BLOGGER

console = Console()

# Load environment variables
load_dotenv()

MERGE_COMMENTS = 'm'
SEPARATE_COMMENTS = 's'
PARAGRAPH_FIX = 'paragraph-fix'
CREATE_PAGE_BUNDLES = 'create-page-bundles'
KNOWN_EXTRAS = (MERGE_COMMENTS, SEPARATE_COMMENTS, PARAGRAPH_FIX, CREATE_PAGE_BUNDLES)

EPILOG = """\b
Optional extras:
  m|s                  m = merge comments into the post file, s = separate .md file (default)
  paragraph-fix        wrap WordPress posts stored as plain text in paragraphs
  create-page-bundles  write each post to <OUTPUT_DIR>/<name>/index.md

\b
Examples:
  blog2md b blog-03-21-2022.xml out
  blog2md b blog-03-21-2022.xml out m
  blog2md w wordpress.xml out s paragraph-fix create-page-bundles
"""


@click.command(epilog=EPILOG)
@click.argument('source', type=click.Choice(['b', 'w'], case_sensitive=False))
@click.argument('backup_xml', type=click.Path(dir_okay=False, path_type=Path))
@click.argument('output_dir', type=click.Path(file_okay=False, path_type=Path))
@click.argument('extras', nargs=-1)
@click.option('--skip-images', is_flag=True,
              help='Skip image downloads (linked images keep their remote URLs)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def cli(source: str, backup_xml: Path, output_dir: Path, extras: tuple, skip_images: bool,
        verbose: bool):
    """
    Convert a Blogger (b) or WordPress (w) backup to Markdown files.

    BACKUP_XML: Path to the backup file to process

    OUTPUT_DIR: Output directory for generated files
    """
    source = source.lower()
    merge_comments = bool(extras) and extras[0] == MERGE_COMMENTS
    paragraph_fix = PARAGRAPH_FIX in extras
    page_bundles = CREATE_PAGE_BUNDLES in extras

    for extra in extras:
        if extra not in KNOWN_EXTRAS:
            console.print(f"[yellow]Ignoring unknown option '{extra}'[/yellow]")

    if verbose:
        console.print(f"[blue]Source: {'Blogger' if source == BLOGGER else 'WordPress'}[/blue]")
        console.print(f"[blue]Backup file: {backup_xml}[/blue]")
        console.print(f"[blue]Output directory: {output_dir}[/blue]")
        console.print(f"[blue]Paragraph fix: {paragraph_fix}[/blue]")
        console.print(f"[blue]Page bundles: {page_bundles}[/blue]")
        console.print(f"[blue]Skip images: {skip_images}[/blue]")
        console.print()

    try:
        converter = BlogToMarkdownConverter(
            merge_comments=merge_comments,
            paragraph_fix=paragraph_fix,
            page_bundles=page_bundles,
            skip_images=skip_images,
            verbose=verbose
        )

        converter.convert(
            source=source,
            export_file=backup_xml,
            output_dir=output_dir
        )

    except KeyboardInterrupt:
        console.print("\n[red]Conversion interrupted by user[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[red]Conversion failed: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


class BlogToMarkdownConverter:
    """Main converter orchestrating the conversion process."""

    def __init__(self, merge_comments: bool = False, paragraph_fix: bool = False,
                 page_bundles: bool = False, skip_images: bool = False, verbose: bool = False):
        """Initialize converter with options."""
        self.merge_comments = merge_comments
        self.paragraph_fix = paragraph_fix
        self.page_bundles = page_bundles
        self.skip_images = skip_images
        self.verbose = verbose

        self.user_agent = os.getenv('BLOG2MD_USER_AGENT')
        self.timeout = float(os.getenv('BLOG2MD_DOWNLOAD_TIMEOUT', DEFAULT_TIMEOUT))
        self.max_workers = int(os.getenv('BLOG2MD_MAX_WORKERS', DEFAULT_MAX_WORKERS))

    def convert(self, source: str, export_file: Path, output_dir: Path) -> Dict[str, Any]:
        """Main conversion process."""

        console.print("🚀 [bold blue]Starting blog export to Markdown conversion...[/bold blue]\n")

        if output_dir.exists():
            console.print(f"[yellow]WARNING: Given output directory \"{output_dir}\" already exists. Files will be overwritten.[/yellow]")
        else:
            output_dir.mkdir(parents=True)

        if self.merge_comments:
            console.print("[blue]INFO: Comments requested to be merged along with posts. (m)[/blue]")
        else:
            console.print("[blue]INFO: Comments requested to be a separate .md file (s - default)[/blue]")

        # Phase 1: Parse export file
        console.print("📋 [blue]Phase 1: Parsing export file...[/blue]")
        parser = ExportParser(str(export_file), source)
        try:
            root = parser.load_export()
        except ExportParseError as e:
            console.print(f"[red]{e}[/red]")
            return {'posts': 0, 'written': 0}
        console.print()

        # Phase 2: Extract posts and comments
        console.print("🔍 [blue]Phase 2: Extracting posts and comments...[/blue]")
        if source == BLOGGER:
            extractor = BloggerExtractor(verbose=self.verbose)
        else:
            extractor = WordPressExtractor(paragraph_fix=self.paragraph_fix, verbose=self.verbose)
        posts = extractor.extract(root)
        console.print()

        writer = OutputWriter(output_dir, merge_comments=self.merge_comments,
                              page_bundles=self.page_bundles)

        with ImageHandler(user_agent=self.user_agent, timeout=self.timeout,
                          max_workers=self.max_workers) as image_handler:
            markdown = HtmlToMarkdown(image_handler, skip_downloads=self.skip_images)

            # Phase 3: Transform content to Markdown
            console.print("📝 [blue]Phase 3: Transforming content to Markdown...[/blue]")
            failed_posts: List[str] = []
            self._transform_posts(posts, writer, markdown, failed_posts)
            console.print()

            # Phase 4: Generate files
            console.print("📄 [blue]Phase 4: Generating Markdown files...[/blue]")
            written = self._generate_files(posts, writer, failed_posts)
            console.print()

            # Phase 5: Wait for image writes and downloads
            console.print("🖼️  [blue]Phase 5: Finishing images...[/blue]")
            image_stats = image_handler.wait()
            console.print(f"   Images written: {image_stats['total_images']} ({image_stats['total_size_mb']} MB)")
            if image_stats['failed_images']:
                console.print(f"   [yellow]Images failed: {image_stats['failed_images']}[/yellow]")
            console.print()

        console.print("✅ [bold green]Conversion completed![/bold green]")

        summary = {
            'posts': len(posts),
            'written': written,
            'comments': sum(len(post['comments']) for post in posts),
            'orphaned_comments': extractor.stats.get('orphaned_comments', 0),
            'failed_posts': len(failed_posts),
            'write_failures': len(writer.failures),
            'images': image_stats['total_images'],
            'failed_images': image_stats['failed_images'],
        }
        self._show_summary(summary, output_dir)
        return summary

    def _transform_posts(self, posts: List[Dict[str, Any]], writer: OutputWriter,
                         markdown: HtmlToMarkdown, failed_posts: List[str]) -> None:
        """Convert post and comment HTML to Markdown, one image context per post.

        A post that cannot be converted is logged, added to failed_posts and
        marked so that it is not written.
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console
        ) as progress:

            task = progress.add_task("Transforming posts", total=len(posts))

            for post in posts:
                try:
                    paths = writer.post_paths(post['slug'])
                    if paths is None:
                        # Already logged and counted by the writer
                        post['failed'] = True
                        progress.advance(task)
                        continue

                    post['post_path'], post['comments_path'] = paths
                    context = ImageContext(post['post_path'])

                    post['content'] = markdown.convert(post['content_html'], context)
                    for comment in post['comments']:
                        comment['title'] = markdown.convert(comment.get('title_html', ''), context)
                        comment['content'] = markdown.convert(comment['content_html'], context)
                except Exception as e:
                    post['failed'] = True
                    failed_posts.append(post['slug'])
                    console.print(f"[red]Failed to process post {post['slug']}: {e}[/red]")

                progress.advance(task)

    def _generate_files(self, posts: List[Dict[str, Any]], writer: OutputWriter,
                        failed_posts: List[str]) -> int:
        """Write every converted post file, then its comments."""
        written = 0

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console
        ) as progress:

            task = progress.add_task("Generating post files", total=len(posts))

            for post in posts:
                if post.get('failed'):
                    progress.advance(task)
                    continue

                try:
                    if writer.write_post(post):
                        written += 1
                        if self.verbose:
                            console.print(f"   Successfully written to {post['post_path']}")
                    writer.write_comments(post)
                except Exception as e:
                    failed_posts.append(post['slug'])
                    console.print(f"[red]Failed to write post {post['slug']}: {e}[/red]")

                progress.advance(task)

        console.print(f"   Generated {written} post files")
        return written

    def _show_summary(self, summary: Dict[str, Any], output_dir: Path) -> None:
        """Show final summary."""
        console.print("\n📈 [bold blue]Conversion Summary:[/bold blue]")
        console.print(f"   Total posts processed: {summary['posts']}")
        console.print(f"   Post files written: {summary['written']}")
        console.print(f"   Comments: {summary['comments']}")

        if summary['orphaned_comments']:
            console.print(f"   [yellow]Orphaned comments dropped: {summary['orphaned_comments']}[/yellow]")
        if summary['failed_posts']:
            console.print(f"   [red]Posts failed: {summary['failed_posts']}[/red]")
        if summary['write_failures']:
            console.print(f"   [red]Write failures: {summary['write_failures']}[/red]")

        console.print(f"   Images: {summary['images']}")
        console.print(f"\n🎉 [bold green]Files generated in: {output_dir}[/bold green]")


if __name__ == '__main__':
    cli()
