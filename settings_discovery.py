"""
settings_discovery.py
End-to-end settings discovery for one installed program.

Pipeline: known profile -> name variants -> path templates -> expansion ->
probe/scan -> registry -> fuzzy fallback -> score -> dedup -> cap.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import config
from models import ArtifactKind, Candidate, DiscoveryResult, PathTemplate, Profile, SoftwareRecord, path_key
from name_variations import NameVariationGenerator, publisher_variants
from path_generators import PathGenerator, default_generators, ordered_variants
from path_expander import PathExpander
from fuzzy_matcher import FuzzyMatcher
from file_scanner import FilesystemScanner
from registry_scanner import RegistryScanner, HIVE_PREFIX, value_count_of
from scoring import ScoringEngine
from profile_cache import ProfileCache, build_discovered_profile, is_excluded
from cancellation_utils import CancellationManager


log = logging.getLogger(__name__)

STRICTNESS_BROAD = "broad"
STRICTNESS_PRECISE = "precise"

# Roots walked one level deep by the fuzzy fallback
FUZZY_ROOT_TEMPLATES = (
    "%APPDATA%",
    "%LOCALAPPDATA%",
    "%DOCUMENTS%",
    "%DOCUMENTS%/My Games",
    "%SAVEDGAMES%",
    "%USERPROFILE%",
)


@dataclass
class DiscoveryOptions:
    """Strictness knobs of a discovery run."""
    strictness: str = STRICTNESS_BROAD
    min_score: int = config.MIN_SCORE_BROAD
    max_results: int = config.DEFAULT_MAX_RESULTS
    max_depth: int = config.SCAN_DEFAULT_DEPTH
    save_context_depth: int = config.SCAN_SAVE_CONTEXT_DEPTH
    scan_result_cap: int = config.SCAN_RESULT_CAP
    max_file_size_mb: int = config.DEFAULT_MAX_FILE_SIZE_MB
    subfolder_whitelist: frozenset = field(default_factory=lambda: config.PRECISE_SUBFOLDER_WHITELIST)
    fuzzy_fallback: bool = True
    registry_scan: bool = True
    use_cached_profiles: bool = True
    learn_profiles: bool = True
    fuzzy_chunk_pause: float = config.FUZZY_CHUNK_PAUSE_SECONDS

    @property
    def precise(self) -> bool:
        return self.strictness == STRICTNESS_PRECISE

    @classmethod
    def broad(cls, **overrides) -> "DiscoveryOptions":
        return cls(**overrides)

    @classmethod
    def precise_mode(cls, **overrides) -> "DiscoveryOptions":
        values = dict(strictness=STRICTNESS_PRECISE, min_score=config.MIN_SCORE_PRECISE, save_context_depth=3)
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_settings(cls, settings: dict) -> "DiscoveryOptions":
        """Build options from a settings_manager dictionary."""
        factory = cls.precise_mode if settings.get("strictness") == STRICTNESS_PRECISE else cls.broad
        return factory(
            max_results=settings.get("max_results", config.DEFAULT_MAX_RESULTS),
            max_file_size_mb=settings.get("max_file_size_mb", config.DEFAULT_MAX_FILE_SIZE_MB),
            fuzzy_fallback=settings.get("fuzzy_fallback_enabled", True),
            registry_scan=settings.get("registry_scan_enabled", True),
            use_cached_profiles=settings.get("profile_cache_enabled", True),
            learn_profiles=settings.get("profile_cache_enabled", True),
        )


class DiscoveryOrchestrator:
    """Runs the discovery pipeline; holds no per-run state, so one instance
    may serve several threads."""

    def __init__(self,
                 options: Optional[DiscoveryOptions] = None,
                 token_table: Optional[Dict[str, str]] = None,
                 generators: Optional[Sequence[PathGenerator]] = None,
                 profile_cache: Optional[ProfileCache] = None,
                 registry=None,
                 logger: Optional[logging.Logger] = None,
                 progress_callback: Optional[Callable[[str], None]] = None,
                 cancellation_manager: Optional[CancellationManager] = None):
        self.options = options or DiscoveryOptions()
        self.log = logger or log
        self.progress_callback = progress_callback
        self.cancellation_manager = cancellation_manager

        self.name_generator = NameVariationGenerator()
        self.generators = list(generators) if generators is not None else default_generators()
        self.expander = PathExpander(token_table)
        self.matcher = FuzzyMatcher()
        self.scoring = ScoringEngine(min_score=self.options.min_score)
        self.scanner = FilesystemScanner(
            precise=self.options.precise,
            max_depth=self.options.max_depth,
            save_context_depth=self.options.save_context_depth,
            result_cap=self.options.scan_result_cap,
            max_file_size_bytes=self.options.max_file_size_mb * 1024 * 1024,
            subfolder_whitelist=self.options.subfolder_whitelist,
            cancellation_manager=cancellation_manager,
        )
        self.registry_scanner = None
        if self.options.registry_scan:
            self.registry_scanner = RegistryScanner(registry=registry, cancellation_manager=cancellation_manager)
        self.profile_cache = profile_cache

    # --- Helpers ---

    def _is_cancelled(self) -> bool:
        return bool(self.cancellation_manager and self.cancellation_manager.check_cancelled())

    def _emit(self, message: str):
        self.log.debug(message)
        if self.progress_callback:
            try:
                self.progress_callback(message)
            except Exception as e:
                self.log.debug(f"Progress callback failed: {e}")

    # --- Entry point ---

    def discover(self, software: SoftwareRecord) -> DiscoveryResult:
        result = DiscoveryResult(software=software)
        name = (software.name or "").strip()
        if not name:
            self.log.info("Discovery skipped: software record has no name.")
            return result

        self.log.info(f"Settings discovery for '{name}' (publisher: '{software.publisher or '-'}')")
        self._emit(f"Searching settings for {name}...")
        found: Dict[str, Candidate] = {}

        if self._is_cancelled():
            result.cancelled = True
            return result

        # 1. Known profile
        profile = None
        if self.profile_cache is not None and self.options.use_cached_profiles:
            profile = self.profile_cache.find_profile(name, software.publisher)
        if profile is not None:
            result.matched_profile = profile.name
            self._emit(f"Checking known locations of profile '{profile.name}'")
            self._collect(found, self._candidates_from_profile(profile, name))
            ranked = self._rank(found, name)
            if ranked:
                self.log.info(f"Profile '{profile.name}' produced {len(ranked)} result(s); skipping heuristic search.")
                result.candidates = ranked
                return result
            found.clear()

        # 2. Heuristic search
        variants = self.name_generator.generate(name)
        publishers = publisher_variants(software.publisher)
        self._emit(f"Generated {len(variants)} name variations")

        phases = (
            ("path probing", lambda: self._probe_templates(software, variants, publishers, found)),
            ("registry scan", lambda: self._scan_registry(name, variants, publishers, found)),
            ("fuzzy scan", lambda: self._fuzzy_fallback(name, variants, found)),
        )
        for phase_name, phase in phases:
            if self._is_cancelled():
                break
            try:
                phase()
            except Exception as e:
                self.log.error(f"Discovery phase '{phase_name}' failed for '{name}': {e}", exc_info=True)

        result.candidates = self._rank(found, name)
        if self._is_cancelled():
            result.cancelled = True
            self.log.info(f"Discovery for '{name}' cancelled; returning {len(result)} partial result(s).")
            return result

        self._emit(f"Found {len(result)} settings location(s) for {name}")
        if result.candidates and (profile is None or not profile.predefined):
            self._learn_profile(software, result.candidates)
        return result

    # --- Phases ---

    def generate_templates(self, software: SoftwareRecord, variants: Iterable[str],
                           publishers: Sequence[str]) -> List[PathTemplate]:
        templates: List[PathTemplate] = []
        variants = list(variants)
        for generator in self.generators:
            try:
                templates.extend(generator.generate(software, variants, publishers))
            except Exception as e:
                self.log.error(f"Path generator '{generator.name}' failed: {e}", exc_info=True)
        return templates

    def _probe_templates(self, software, variants, publishers, found: Dict[str, Candidate]):
        templates = self.generate_templates(software, variants, publishers)
        total = len(templates)
        self._emit(f"Probing {total} candidate paths")
        probed = set()
        name = software.name

        for index, template in enumerate(templates, start=1):
            if self._is_cancelled():
                self.log.info(f"Path probing cancelled at {index}/{total}.")
                return
            if index % config.PROGRESS_INTERVAL == 0:
                self._emit(f"Processed {index}/{total} paths, {len(found)} files found")

            for path in self.expander.expand_all(template.template):
                if not self.expander.is_resolved(path):
                    continue
                key = path_key(path)
                if key in probed:
                    continue
                probed.add(key)
                source = f"{template.source_generator}: {template.template}"
                self._collect(found, self._probe_path(path, name, source))

    def _probe_path(self, path: str, name: str, source: str) -> List[Candidate]:
        try:
            if os.path.isdir(path):
                return self.scanner.scan_directory(path, name, source)
            if os.path.isfile(path):
                candidate = self.scanner.make_candidate(path, source)
                return [candidate] if candidate else []
        except OSError as e:
            self.log.debug(f"Probe of '{path}' failed: {e}")
        return []

    def _scan_registry(self, name, variants, publishers, found: Dict[str, Candidate]):
        if self.registry_scanner is None or not self.registry_scanner.available:
            return
        ordered = [name] + [v for v in ordered_variants(variants) if v.lower() != name.lower()]
        self._collect(found, self.registry_scanner.scan(ordered, publishers))

    def _fuzzy_fallback(self, name, variants, found: Dict[str, Candidate]):
        if not self.options.fuzzy_fallback:
            return
        if self._rank(found, name):
            return
        roots = [self.expander.expand(t) for t in FUZZY_ROOT_TEMPLATES]
        roots = [r for r in roots if self.expander.is_resolved(r)]
        self._emit("No direct match; trying fuzzy folder matching")
        self._collect(found, self.scanner.scan_fuzzy_global(
            roots, variants, name, self.matcher, self._emit, self.options.fuzzy_chunk_pause))

    def _candidates_from_profile(self, profile: Profile, name: str) -> List[Candidate]:
        candidates: List[Candidate] = []
        source = f"profile: {profile.name}"
        for profile_path in sorted(profile.config_paths, key=lambda p: p.priority):
            if profile_path.path.upper().startswith(HIVE_PREFIX + "\\"):
                if self.registry_scanner is not None and self.registry_scanner.available:
                    key_path = profile_path.path[len(HIVE_PREFIX) + 1:]
                    candidate, _ = self.registry_scanner.inspect_key(key_path, list_subkeys=False)
                    if candidate:
                        candidate.source_description = source
                        candidates.append(candidate)
                continue

            for path in self.expander.expand_all(profile_path.path):
                if not self.expander.is_resolved(path):
                    continue
                for candidate in self._probe_path(path, name, source):
                    relative = os.path.relpath(candidate.path, path) if profile_path.is_directory else candidate.path
                    if is_excluded(relative, profile.exclude_patterns):
                        continue
                    candidates.append(candidate)
        return candidates

    # --- Scoring and ranking ---

    @staticmethod
    def _collect(found: Dict[str, Candidate], candidates: Iterable[Candidate]):
        for candidate in candidates:
            found.setdefault(candidate.key, candidate)

    def score_candidate(self, candidate: Candidate, name: str) -> int:
        if candidate.artifact_kind == ArtifactKind.REGISTRY_KEY and candidate.path.upper().startswith(HIVE_PREFIX + "\\"):
            return self.scoring.score_registry_key(candidate.path, name, value_count_of(candidate))
        return self.scoring.score(candidate.path, name, candidate.size_bytes, candidate.via_whitelisted_subfolder)

    def _rank(self, found: Dict[str, Candidate], name: str) -> List[Candidate]:
        admitted = []
        for candidate in found.values():
            candidate.score = self.score_candidate(candidate, name)
            if self.scoring.is_admitted(candidate.score):
                admitted.append(candidate)
        admitted.sort(key=lambda c: (-c.score, -c.last_modified, c.path.lower()))
        return admitted[:self.options.max_results]

    def _learn_profile(self, software: SoftwareRecord, candidates: List[Candidate]):
        if self.profile_cache is None or not self.options.learn_profiles:
            return
        profile = build_discovered_profile(software.name, software.publisher, candidates)
        if profile and self.profile_cache.add_profile(profile):
            self.log.info(f"Stored discovered profile for '{software.name}'.")


def discover_many(records: Iterable[SoftwareRecord], orchestrator: Optional[DiscoveryOrchestrator] = None,
                  max_workers: int = 4) -> List[DiscoveryResult]:
    """Discover several programs concurrently; results keep the input order."""
    orchestrator = orchestrator or DiscoveryOrchestrator()
    records = list(records)
    if not records:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        return list(executor.map(orchestrator.discover, records))
