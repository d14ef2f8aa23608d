# Report naming/output
from dataclasses import dataclass

@dataclass
class WritingConfig:
    benchmark_name: str = "AMI Corpus Overlapped Speech Detection - Final"
    dataset_label: str = "AMI Meeting Corpus"
    output_path: str = "final_ami_der_results.json"
