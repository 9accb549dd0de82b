from pathlib import Path


class PathManager:
    def __init__(self, base_dir=None):
        if base_dir is None:
            # Default to project root (four levels up from this file)
            self.base_dir = Path(__file__).parent.parent.parent.parent
        else:
            self.base_dir = Path(base_dir)

        # Main directories at project root
        self.data_dir = self.base_dir / "data"
        self.results_dir = self.base_dir / "results"

        # Data subdirectories
        self.raw_data_dir = self.data_dir / "raw"
        self.output_data_dir = self.data_dir / "output"

        # Results subdirectories
        self.previews_dir = self.results_dir / "previews"

    # Data paths
    def get_input_workbook_path(self, filename):
        """Get path for a source workbook"""
        return self.raw_data_dir / filename

    def get_output_workbook_path(self, input_path):
        """Get path for the report workbook written next to data/output"""
        input_path = Path(input_path)
        return self.output_data_dir / f"{input_path.stem}_growth_report{input_path.suffix or '.xlsx'}"

    # Results paths
    def get_preview_path(self, input_path):
        """Get path for the PNG preview of the growth chart"""
        return self.previews_dir / f"{Path(input_path).stem}_growth.png"
