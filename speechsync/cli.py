"""Command-Line Interface handler for SpeechSync."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config_loader import ConfigLoader, credentials_status, get_section
from .log_setup import setup_logging
from .synthesizer import DEFAULT_OUTPUT_FORMAT, AzureSpeechSynthesizer
from .speech_generator import SpeechSubtitleGenerator
from .exceptions import SpeechSyncError, ConfigurationError, InputError
from .voices import list_voices

logger = logging.getLogger(__name__)

def load_runtime_config(config_path: str, required: bool) -> dict:
    """Loads the YAML config; a missing file is only fatal when given explicitly."""
    if not os.path.exists(config_path) and not required:
        logger.info(f"No configuration file at {config_path}; using defaults and environment variables.")
        return {}
    return ConfigLoader().load_config(config_path)

def build_generator(config: dict) -> SpeechSubtitleGenerator:
    """Wires the Azure synthesizer and the generator from configuration."""
    synthesis_cfg = get_section(config, 'synthesis')
    synthesizer = AzureSpeechSynthesizer(output_format=synthesis_cfg.get('output_format', DEFAULT_OUTPUT_FORMAT))
    return SpeechSubtitleGenerator(config=config, synthesizer=synthesizer)

class CLIHandler:
    """Parses arguments and orchestrates the SpeechSync process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="SpeechSync: Generate speech audio with sentence-synchronized subtitles from text.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        source = parser.add_mutually_exclusive_group()
        source.add_argument("-t", "--text", help="Text to synthesize.")
        source.add_argument("-i", "--input-file", help="Path to a UTF-8 text file to synthesize.")
        parser.add_argument(
            "-o", "--output-dir",
            default=None, # Default taken from config
            help="Directory to save the generated audio and subtitle files."
        )
        parser.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        parser.add_argument("--voice", default=None, help="Voice name (default from config).")
        parser.add_argument(
            "--translate",
            action="store_true",
            help="Also write translated and bilingual subtitle tracks."
        )
        parser.add_argument(
            "--staging-dir",
            default=None,
            help="Override the directory used for per-sentence temporary audio."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        parser.add_argument("--list-voices", nargs="?", const="", metavar="FILTER",
                            help="List known voices (optionally filtered by language) and exit.")
        parser.add_argument("--check-config", action="store_true",
                            help="Report whether speech and translation credentials are configured and exit.")
        return parser

    def _read_text(self, args: argparse.Namespace) -> str:
        if args.input_file:
            try:
                with open(args.input_file, 'r', encoding='utf-8') as f:
                    return f.read()
            except OSError as e:
                raise InputError(f"Could not read input file {args.input_file}: {e}") from e
        if args.text is None:
            raise InputError("Provide --text or --input-file.")
        return args.text

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parses arguments, sets up logging, loads config, and runs the generator. Returns an exit code."""
        args = self.parser.parse_args(argv)

        if args.list_voices is not None:
            for voice in list_voices(args.list_voices):
                print(f"{voice.name:<36} {voice.language:<22} {voice.gender}")
            return 0

        load_dotenv()
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level, log_dir='logs', log_file='speechsync_init.log')

        try:
            config = load_runtime_config(args.config, required=args.config != "config.yaml")
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}")
            return 1

        setup_logging(
            log_level=log_level,
            log_dir=config.get('log_dir', 'logs'),
            log_file=config.get('log_file', 'speechsync.log')
        )

        if args.check_config:
            status = credentials_status(config)
            print(f"Azure Speech configured: {status['speech']}")
            print(f"Azure OpenAI translation configured: {status['translation']}")
            return 0 if status['speech'] else 1

        if args.staging_dir:
            logger.info(f"Overriding staging_dir from config with CLI argument: {args.staging_dir}")
            config['staging_dir'] = args.staging_dir
        output_dir = args.output_dir or config.get('output_dir', 'output')

        try:
            text = self._read_text(args)
            generator = build_generator(config)
            result = generator.generate(text, output_dir, voice=args.voice, translate=args.translate)
        except SpeechSyncError as e:
            logger.error(f"A SpeechSync error occurred: {e}")
            return 1
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            return 1
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            return 2

        print(f"Audio:     {result.audio_path} ({result.audio_size} bytes)")
        print(f"Subtitles: {result.srt_path} ({result.srt_size} bytes)")
        if result.translated_srt_path:
            print(f"Translated subtitles: {result.translated_srt_path}")
            print(f"Bilingual subtitles:  {result.bilingual_srt_path}")
        print(f"Duration:  {result.duration_ms / 1000:.2f}s, {result.sentence_count} sentence(s)")
        return 0

def main() -> None:
    sys.exit(CLIHandler().run())
