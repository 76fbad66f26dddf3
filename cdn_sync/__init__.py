"""
cdn-sync

Synchronizes a local tree of static assets (stylesheets, scripts, images)
to an S3-compatible bucket fronted by a CDN, uploading only what changed.

Modules:
- key_mapper: local path -> object key
- remote_index: snapshot of keys already in the bucket
- policy: per-key upload decision
- content: rewritten / gzipped upload bodies and headers
- uploader: the two-phase sync run
- cli: ``cdn-sync upload``
"""
