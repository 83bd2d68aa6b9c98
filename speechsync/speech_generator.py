"""Orchestrates the text-to-speech-and-subtitles pipeline."""

import asyncio
import logging
import os
import time
from typing import List, Mapping, Optional

from .config_loader import get_section, load_speech_credentials, load_translation_credentials
from .exceptions import FileSystemError, InputError, SpeechSyncError
from .models import GenerationResult, SentenceTiming
from .orchestrator import SynthesisOrchestrator
from .segmenter import DEFAULT_TERMINATORS, SentenceSplitter
from .subtitle_formatter import SRTFormatter, SubtitleVariant
from .synthesizer import FragmentSynthesizer
from .timeline import build_timeline, validate_timeline
from .translator import DEFAULT_TARGET_LANGUAGE, AzureOpenAITranslator, Translator, translate_sentences
from .utils import build_base_name, ensure_dir_exists, remove_files
from .voices import DEFAULT_VOICE

logger = logging.getLogger(__name__)

class SpeechSubtitleGenerator:
    """
    Manages the end-to-end process of turning text into a WAV file and its subtitles.
    """

    def __init__(
        self,
        config: dict,
        synthesizer: FragmentSynthesizer,
        translator: Optional[Translator] = None,
        environ: Optional[Mapping[str, str]] = None
    ):
        """
        Initializes the SpeechSubtitleGenerator.

        Args:
            config: A dictionary containing configuration settings.
            synthesizer: Adapter used to synthesize each sentence.
            translator: Translator for the translated tracks. When omitted, an
                        AzureOpenAITranslator is built from the configuration
                        the first time a translation is requested.
            environ: Environment used to resolve credentials (defaults to os.environ).
        """
        self.config = config
        self.synthesizer = synthesizer
        self.translator = translator
        self.environ = os.environ if environ is None else environ

        self.staging_dir = config.get('staging_dir') or os.path.join(config.get('output_dir', 'output'), '.staging')
        self.default_voice = config.get('default_voice', DEFAULT_VOICE)

        splitter_cfg = get_section(config, 'splitter')
        self.splitter = SentenceSplitter(splitter_cfg.get('terminators', DEFAULT_TERMINATORS))

        synthesis_cfg = get_section(config, 'synthesis')
        self.orchestrator = SynthesisOrchestrator(
            synthesizer,
            self.staging_dir,
            fail_on_zero_duration=bool(synthesis_cfg.get('fail_on_zero_duration', False)),
        )

        translation_cfg = get_section(config, 'translation')
        self.target_language = translation_cfg.get('target_language', DEFAULT_TARGET_LANGUAGE)
        self.translation_timeout = float(translation_cfg.get('timeout_seconds', 60))

        self.subtitle_formatter = SRTFormatter()

    def _get_translator(self) -> Translator:
        """Returns the injected translator or builds one; raises ConfigurationError if credentials are missing."""
        if self.translator is None:
            credentials = load_translation_credentials(self.config, self.environ)
            self.translator = AzureOpenAITranslator(
                credentials,
                target_language=self.target_language,
                timeout=self.translation_timeout,
            )
        return self.translator

    def _get_output_paths(self, output_dir: str, base_name: str) -> dict:
        ext = self.subtitle_formatter.extension
        return {
            'audio': os.path.join(output_dir, f"{base_name}.wav"),
            SubtitleVariant.SOURCE: os.path.join(output_dir, f"{base_name}.{ext}"),
            SubtitleVariant.TRANSLATED: os.path.join(output_dir, f"{base_name}.translated.{ext}"),
            SubtitleVariant.BILINGUAL: os.path.join(output_dir, f"{base_name}.bilingual.{ext}"),
        }

    def _write_audio(self, container: bytes, path: str) -> int:
        try:
            with open(path, "wb") as f:
                f.write(container)
        except OSError as e:
            logger.error(f"Failed to write audio file {path}: {e}", exc_info=True)
            raise FileSystemError(f"Could not write audio file {path}: {e}") from e
        logger.info(f"Combined audio saved to: {path} ({len(container)} bytes)")
        return len(container)

    def _persist(
        self,
        paths: dict,
        container: bytes,
        timings: List[SentenceTiming],
        translations: Optional[List[str]],
        duration_ms: float
    ) -> GenerationResult:
        """Writes every output of the batch; on failure removes whatever was already written."""
        variants = [SubtitleVariant.SOURCE]
        if translations is not None:
            variants += [SubtitleVariant.TRANSLATED, SubtitleVariant.BILINGUAL]
        rendered = {v: self.subtitle_formatter.render(timings, translations, v) for v in variants}

        written: List[str] = []
        try:
            written.append(paths['audio'])
            audio_size = self._write_audio(container, paths['audio'])
            sizes = {}
            for variant, content in rendered.items():
                written.append(paths[variant])
                sizes[variant] = self.subtitle_formatter.write(content, paths[variant])
        except BaseException:
            logger.error("Writing outputs failed; removing partial files")
            remove_files(*written)
            raise

        result = GenerationResult(
            audio_path=paths['audio'],
            srt_path=paths[SubtitleVariant.SOURCE],
            audio_size=audio_size,
            srt_size=sizes[SubtitleVariant.SOURCE],
            duration_ms=duration_ms,
            timings=timings,
            translations=translations,
        )
        if translations is not None:
            result.translated_srt_path = paths[SubtitleVariant.TRANSLATED]
            result.bilingual_srt_path = paths[SubtitleVariant.BILINGUAL]
        return result

    async def agenerate(
        self,
        text: str,
        output_dir: str,
        voice: Optional[str] = None,
        translate: bool = False
    ) -> GenerationResult:
        """
        Executes the full pipeline for one piece of text.

        Args:
            text: Input text.
            output_dir: Directory that receives the audio and subtitle files.
            voice: Voice identifier; defaults to the configured voice.
            translate: Also produce translated and bilingual subtitle tracks.

        Returns:
            A GenerationResult describing the written files.

        Raises:
            InputError: If the text is blank or contains no sentences.
            ConfigurationError: If required credentials are missing (checked before any remote call).
            SynthesisError, TranslationError, FormatError: If a remote step or the audio merge fails.
            FileSystemError: If output files cannot be written.
        """
        start_time = time.time()
        if not text or not isinstance(text, str) or not text.strip():
            raise InputError("Text is required and must be a non-empty string")
        voice = voice or self.default_voice

        credentials = load_speech_credentials(self.config, self.environ)
        translator = self._get_translator() if translate else None

        sentences = self.splitter.split(text)
        if not sentences:
            raise InputError("No sentences found in text")
        logger.info(f"--- Processing text ({len(text)} characters, {len(sentences)} sentences) with voice: {voice} ---")

        ensure_dir_exists(output_dir)
        timestamp = int(time.time() * 1000)
        paths = self._get_output_paths(output_dir, build_base_name(timestamp, voice))

        try:
            logger.info("Step 1: Synthesizing sentences...")
            batch = await self.orchestrator.synthesize_all(sentences, voice, credentials, batch_timestamp=timestamp)

            logger.info("Step 2: Building sentence timeline...")
            timings = build_timeline(batch.sentences, batch.durations)
            validate_timeline(timings)

            translations = None
            if translator is not None:
                logger.info("Step 3: Translating sentences...")
                translations = await translate_sentences(translator, batch.sentences)

            logger.info("Step 4: Writing audio and subtitles...")
            result = self._persist(paths, batch.combined.container, timings, translations, batch.total_duration_ms)
        except SpeechSyncError as e:
            logger.error(f"Generation failed: {e}")
            raise

        logger.info(
            f"--- Completed in {time.time() - start_time:.2f}s. Total duration: {result.duration_ms:.0f}ms, "
            f"Sentences: {result.sentence_count} ---"
        )
        return result

    def generate(
        self,
        text: str,
        output_dir: str,
        voice: Optional[str] = None,
        translate: bool = False
    ) -> GenerationResult:
        """Synchronous wrapper around agenerate() for command-line use."""
        return asyncio.run(self.agenerate(text, output_dir, voice=voice, translate=translate))
