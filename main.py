import click
import logging
from pathlib import Path
from dotenv import load_dotenv

from visionbulk.config import Config, setup_directories
from visionbulk.core.ai_client import GenAIClient
from visionbulk.core.analyzer import ScriptAnalyzer
from visionbulk.core.bundler import bundle_scenes, NothingToBundleError, BundleError
from visionbulk.core.exporter import write_scene_files, write_manifest, ExportError
from visionbulk.core.illustrator import SceneIllustrator
from visionbulk.core.models import RunSnapshot, SceneStatus
from visionbulk.core.orchestrator import BulkOrchestrator, RunError

logger = logging.getLogger(__name__)


def log_progress(snapshot: RunSnapshot):
    """Reports each scene once it reaches a terminal state."""
    current, total = snapshot.progress.current, snapshot.progress.total
    if snapshot.finished or current == 0:
        return
    # Start of the next scene; its predecessor was reported already
    if current < total and snapshot.scenes[current].status == SceneStatus.GENERATING:
        return
    scene = snapshot.scenes[current - 1]
    if scene.status == SceneStatus.ERROR:
        logger.warning(f"Generating ({current}/{total}) - scene {scene.id}: {scene.error}")
    else:
        logger.info(f"Generating ({current}/{total}) - scene {scene.id} done")


@click.command()
@click.option('--text-file', required=True, type=click.Path(exists=True, dir_okay=False), help='Path to the input script or story.')
@click.option('--aspect-ratio', default=Config.DEFAULT_ASPECT_RATIO, show_default=True,
              type=click.Choice(Config.ASPECT_RATIOS), help='Aspect ratio applied to every scene.')
@click.option('--output-dir', default=str(Config.BASE_OUTPUT_DIR), show_default=True, help='Directory to save results.')
@click.option('--zip/--no-zip', 'make_zip', default=True, show_default=True, help='Bundle all completed scenes into one ZIP.')
@click.option('--verbose', is_flag=True, help='Enable debug logging.')
def main(text_file, aspect_ratio, output_dir, make_zip, verbose):
    """
    Generates one illustration per scene of a script using Gemini,
    keeping characters consistent across images.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    # 1. Config & Setup
    load_dotenv()
    try:
        Config.validate()
    except ValueError as e:
        raise click.ClickException(str(e))

    with open(text_file, 'r', encoding='utf-8') as f:
        text_content = f.read()
    if not text_content.strip():
        raise click.ClickException(f"{text_file} is empty.")

    logger.info(f"Loaded text file: {text_file} ({len(text_content)} chars)")

    output_path = Path(output_dir)
    setup_directories(output_path)

    # 2. Initialize Core Components
    ai_client = GenAIClient()
    analyzer = ScriptAnalyzer(ai_client)
    illustrator = SceneIllustrator(ai_client)
    orchestrator = BulkOrchestrator(analyzer.analyze, illustrator.generate_image)

    # 3. Analyze and generate
    logger.info("Analyzing script...")
    try:
        result = orchestrator.run_to_completion(text_content, aspect_ratio, on_snapshot=log_progress)
    except RunError as e:
        logger.error(str(e))
        raise click.ClickException(str(e))

    # 4. Save results
    try:
        write_scene_files(result.scenes, output_path / "scenes")
        write_manifest(result, output_path / Config.MANIFEST_FILENAME)
    except ExportError as e:
        logger.error(str(e))
        raise click.ClickException(str(e))

    if make_zip:
        try:
            archive = bundle_scenes(result.scenes)
        except (NothingToBundleError, BundleError) as e:
            logger.error(str(e))
            raise click.ClickException(str(e))
        zip_path = output_path / Config.BUNDLE_FILENAME
        zip_path.write_bytes(archive)
        logger.info(f"Archive saved to {zip_path}")

    logger.info(
        f"Job Complete! {len(result.completed_scenes)}/{result.progress.total} scenes illustrated. "
        f"Check the output directory."
    )

if __name__ == '__main__':
    main()
