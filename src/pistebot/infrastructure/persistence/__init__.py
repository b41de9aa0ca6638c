from .settlement_file_writer import SettlementFileWriter, InMemorySettlementSink, ensure_output_dir

__all__ = ["SettlementFileWriter", "InMemorySettlementSink", "ensure_output_dir"]
