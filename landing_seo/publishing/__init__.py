from landing_seo.publishing.renderer import SiteInfo, render_landing_page
from landing_seo.publishing.slug import is_valid_slug, slugify
from landing_seo.publishing.storage import FileSystemSink
