#!/usr/bin/env python3
"""
Run keypoint detection, description and matching over an image sequence.

Examples:
  featmatch --config configs/default.yaml
  featmatch --config configs/default.yaml --detector FAST --descriptor BRIEF --selector SEL_KNN
  featmatch --images data/KITTI/image_00/data --detector HARRIS --visualize
"""
import argparse
import logging
import sys

from featmatch.config import ConfigManager, PipelineConfig
from featmatch.errors import FeatureMatchError
from featmatch.pipeline import MatchingPipeline, load_image_sequence

logger = logging.getLogger("featmatch")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Keypoint detection / description / matching benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='YAML configuration file')
    parser.add_argument('--detector', type=str, default=None,
                        help='SHITOMASI, HARRIS, FAST, BRISK, ORB, AKAZE, SIFT')
    parser.add_argument('--descriptor', type=str, default=None,
                        help='BRISK, BRIEF, ORB, FREAK, AKAZE, SIFT')
    parser.add_argument('--matcher', type=str, default=None,
                        help='MAT_BF or MAT_FLANN')
    parser.add_argument('--selector', type=str, default=None,
                        help='SEL_NN or SEL_KNN')
    parser.add_argument('--images', type=str, default=None,
                        help='directory of the image sequence')
    parser.add_argument('--visualize', action='store_true',
                        help='show detections and matches in windows')
    parser.add_argument('--report', type=str, default=None,
                        help='write the run summary to this YAML file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def build_config(args):
    """Merge the config file (if any) with the command line overrides."""
    config = ConfigManager.load_config(args.config) if args.config else {}
    for key in ('detector', 'descriptor', 'matcher', 'selector'):
        value = getattr(args, key)
        if value is not None:
            config[key] = value
    if args.visualize:
        config['visualize'] = True
    if args.images is not None:
        config = ConfigManager.merge_configs(config, {'images': {'directory': args.images}})
    return PipelineConfig.from_dict(config)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        config = build_config(args)
        pipeline = MatchingPipeline(config)
        src = config.images
        frames = load_image_sequence(src.directory, src.prefix, src.start, src.end,
                                     src.fill_width, src.extension)
        for index, image in frames:
            stats = pipeline.process_frame(image, index)
            logger.info("Frame %d: %d keypoints, %s matches", stats.index, stats.num_keypoints,
                        "-" if stats.num_matches is None else stats.num_matches)
    except (FeatureMatchError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    summary = pipeline.summary()
    for key, value in summary.items():
        logger.info("%s: %s", key, value)
    if args.report:
        ConfigManager.save_config({'config': config.to_dict(), 'summary': summary,
                                   'frames': [vars(s) for s in pipeline.stats]}, args.report)
        logger.info("Report written to %s", args.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
