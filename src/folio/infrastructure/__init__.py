"""Infrastructure layer — filesystem, parsing, templates, math, and the content index."""
