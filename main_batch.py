#!/usr/bin/env python3
"""
SpeechSync Batch Processing Entry Point

Processes all .txt files in a specified directory, ordered by size,
generating speech audio and subtitles for each into an output folder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

from dotenv import load_dotenv
# Progress bar library
from tqdm import tqdm

from speechsync.cli import build_generator, load_runtime_config
from speechsync.log_setup import setup_logging
from speechsync.exceptions import SpeechSyncError, ConfigurationError, FileSystemError
from speechsync.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

def find_and_sort_texts(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all .txt files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for text files.

    Returns:
        A list of (filepath, filesize) tuples, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    texts = []
    logger.info(f"Scanning directory for text files: {input_dir}")
    for filename in os.listdir(input_dir):
        if filename.lower().endswith(".txt"):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    texts.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    texts.sort(key=lambda item: item[1])
    logger.info(f"Found {len(texts)} text files. Sorted by size (smallest first).")
    return texts


def run_batch_processing() -> int:
    """Parses arguments, sets up, and runs batch generation. Returns an exit code."""
    parser = argparse.ArgumentParser(
        description="SpeechSync Batch: Generate audio and subtitles for every .txt file in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("-i", "--input-dir", required=True, help="Directory containing the input .txt files.")
    parser.add_argument("-o", "--output-dir", default=None,
                        help="Output directory (default: <input-dir>/Speech).")
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to the configuration YAML file.")
    parser.add_argument("--voice", default=None, help="Voice name (default from config).")
    parser.add_argument("--translate", action="store_true",
                        help="Also write translated and bilingual subtitle tracks.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    args = parser.parse_args()

    load_dotenv()
    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='speechsync_batch_init.log')

    try:
        config = load_runtime_config(args.config, required=args.config != "config.yaml")
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1

    setup_logging(
        log_level=log_level,
        log_dir=config.get('log_dir', 'logs'),
        log_file=config.get('log_file', 'speechsync_batch.log')
    )

    try:
        text_files = [item[0] for item in find_and_sort_texts(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        return 1
    if not text_files:
        logger.warning(f"No .txt files found in {args.input_dir}. Exiting.")
        return 0

    output_dir = args.output_dir or os.path.join(args.input_dir, "Speech")
    try:
        ensure_dir_exists(output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        return 1

    # Components are built once and reused for every file
    try:
        generator = build_generator(config)
    except (SpeechSyncError, ValueError) as e:
        logger.critical(f"Failed to initialize SpeechSync components: {e}")
        return 1

    total_files = len(text_files)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()
    logger.info(f"--- Starting Batch Generation for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for text_path in text_files:
            filename = os.path.basename(text_path)
            pbar.set_description(f"Processing: {filename[:30]}")
            try:
                with open(text_path, 'r', encoding='utf-8') as f:
                    text = f.read()
                result = generator.generate(text, output_dir, voice=args.voice, translate=args.translate)
                logger.info(f"{filename}: wrote {result.audio_path} ({result.sentence_count} sentences)")
                files_processed += 1
            except (SpeechSyncError, OSError) as e:
                logger.error(f"SpeechSync failed for '{filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                return 1
            except Exception as e:
                logger.error(f"An unexpected error occurred processing '{filename}': {e}", exc_info=True)
                files_failed += 1
            finally:
                pbar.update(1)

    logger.info("--- Batch Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")
    return 1 if files_failed else 0


if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("SpeechSync requires Python 3.8 or later.\n")
        sys.exit(1)
    sys.exit(run_batch_processing())
