"""
Upload engine: synchronizes the local asset tree with the bucket.

A run has two linear phases, plain then gzip. Every decision of a run is
taken against one SyncContext built at its start: the full key maps, the
remote key snapshot and the pending-image flag never change mid-run.
"""

import concurrent.futures
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from shared.models import (
    AssetHostConfig, SyncDecision, SyncOptions, SyncReport, Variant,
)
from .config import load_credentials
from .content import prepared_content
from .css_rewriter import CssRewriter
from .errors import SyncCancelled
from .key_mapper import KeyMapper
from .policy import images_pending, should_upload
from .provider_factory import StorageProviderFactory
from .remote_index import RemoteKeyIndex
from .scanner import scan_assets
from .storage_provider import S3StorageProvider


@dataclass(frozen=True)
class SyncContext:
    """Immutable state shared by every decision of one run."""
    config: AssetHostConfig
    options: SyncOptions
    key_mapper: KeyMapper
    css_rewriter: CssRewriter
    index: RemoteKeyIndex
    plain_keys: Dict[str, Path]
    gzip_keys: Dict[str, Path]
    images_pending: bool

    @classmethod
    def build(cls, config: AssetHostConfig, storage: S3StorageProvider,
              options: SyncOptions) -> 'SyncContext':
        paths = list(scan_assets(config))
        key_mapper = KeyMapper(config)

        plain_keys = key_mapper.key_map(paths, Variant.PLAIN)
        gzip_keys = key_mapper.key_map(paths, Variant.GZIP) if config.gzip else {}
        index = RemoteKeyIndex(storage, key_mapper.listing_prefixes())

        # Only stylesheet rewriting depends on pending images
        pending = config.rewrite_css_path and images_pending(plain_keys, index, config)

        return cls(
            config=config,
            options=options,
            key_mapper=key_mapper,
            css_rewriter=CssRewriter(config, plain_keys),
            index=index,
            plain_keys=plain_keys,
            gzip_keys=gzip_keys,
            images_pending=pending,
        )


class UploadEngine:
    """Handles key computation, diffing and uploading of asset files."""

    def __init__(self, config: AssetHostConfig,
                 storage: Optional[S3StorageProvider] = None,
                 environment: Optional[str] = None,
                 progress_callback: Callable[[str], None] = print):
        self.config = config
        self.progress_callback = progress_callback

        if storage is None:
            creds = load_credentials(config, environment)
            storage = StorageProviderFactory.connect(config.provider, creds)
        self.storage = storage

    def run(self, options: Optional[SyncOptions] = None) -> SyncReport:
        """
        Execute a full sync pass.

        Raises:
            UploadError: On the first failed read or write; the run stops there
            SyncCancelled: If the options' cancel_event gets set
        """
        options = options or SyncOptions()
        report = SyncReport(dryrun=options.dryrun)
        context = SyncContext.build(self.config, self.storage, options)

        try:
            self._say(options, "-- Updating uncompressed files")
            self._run_phase(context.plain_keys, Variant.PLAIN, context, report)

            if self.config.gzip:
                self._say(options, "-- Updating compressed files")
                self._run_phase(context.gzip_keys, Variant.GZIP, context, report)
        finally:
            context.index.reset()

        return report

    def _say(self, options: SyncOptions, message: str) -> None:
        if options.verbose:
            self.progress_callback(message)

    def _run_phase(self, keys: Dict[str, Path], variant: Variant,
                   context: SyncContext, report: SyncReport) -> None:
        options = context.options
        sequential = options.parallel <= 1
        selected: List[SyncDecision] = []

        for key, path in keys.items():
            self._check_cancelled(options)

            decision = SyncDecision(key=key, path=path, variant=variant,
                                    upload=should_upload(key, path, variant, context))
            report.decisions.append(decision)
            self._say(options, str(decision))

            if not decision.upload or options.dryrun:
                continue
            if sequential:
                self._upload(decision, context)
            else:
                selected.append(decision)

        if selected:
            self._upload_parallel(selected, context)

    def _upload_parallel(self, decisions: List[SyncDecision], context: SyncContext) -> None:
        with ThreadPoolExecutor(max_workers=context.options.parallel) as executor:
            futures = [executor.submit(self._upload, d, context) for d in decisions]
            try:
                for future in concurrent.futures.as_completed(futures):
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    def _upload(self, decision: SyncDecision, context: SyncContext) -> None:
        self._check_cancelled(context.options)
        with prepared_content(decision.path, decision.variant, context) as content:
            self.storage.write_object(str(content.path), decision.key, content.headers)

    @staticmethod
    def _check_cancelled(options: SyncOptions) -> None:
        if options.cancelled:
            raise SyncCancelled("Sync cancelled")
