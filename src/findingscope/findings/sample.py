"""Built-in sample dataset, shown when the very first fetch fails.

Twelve AWS findings, three per severity level, created one per day going
back from the snapshot time so the timeline has something to show.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from findingscope.findings.store import FindingStore

_SAMPLE_ROWS = [
    (
        "finding-1",
        "S3 Bucket Public Access",
        'S3 bucket "company-data" allows public read access. Anyone on the '
        "internet can list and download its objects, exposing sensitive data.",
        "CRITICAL",
        "aws:s3:bucket:company-data",
        "Block public access on the bucket and review the bucket policy. "
        "Audit the contents for sensitive data.",
    ),
    (
        "finding-2",
        "IAM User Over-Privileged",
        'User "developer1" has administrator access, violating least privilege. '
        "The user only needs access to development resources.",
        "HIGH",
        "aws:iam:user/developer1",
        "Restrict the user to the minimum permissions required for development.",
    ),
    (
        "finding-3",
        "Database Backups Not Encrypted",
        "RDS backups are stored unencrypted. The database holds customer "
        "personal information.",
        "MEDIUM",
        "aws:rds:instance:prod-db",
        "Enable encryption for snapshots and automated backups.",
    ),
    (
        "finding-4",
        "CloudTrail Logging Disabled",
        "CloudTrail logging is disabled for the account, limiting audit and "
        "incident response capabilities.",
        "HIGH",
        "aws:cloudtrail:trail/main-trail",
        "Enable CloudTrail in all regions and ship logs to a protected bucket.",
    ),
    (
        "finding-5",
        "Weak Password Policy",
        "The IAM password policy does not enforce sufficient complexity and "
        "allows passwords shorter than 8 characters.",
        "MEDIUM",
        "aws:iam:account-password-policy",
        "Require at least 12 characters, symbols, and periodic rotation.",
    ),
    (
        "finding-6",
        "Security Group Too Permissive",
        'Security group "web-servers" allows SSH (22) and RDP (3389) from any '
        "IP address, creating a large attack surface.",
        "CRITICAL",
        "aws:ec2:security-group/sg-web-servers",
        "Limit management ports to known address ranges immediately.",
    ),
    (
        "finding-7",
        "Root Account Access Key Active",
        "The AWS root account has active access keys. The root account should "
        "only be used for account management.",
        "CRITICAL",
        "aws:iam:root-account",
        "Delete the root access keys and enable MFA on the root account.",
    ),
    (
        "finding-8",
        "EBS Volumes Not Encrypted",
        "Several EBS volumes do not use encryption at rest. They contain "
        "application logs and temporary data.",
        "LOW",
        "aws:ec2:volume/vol-123456789",
        "Low risk for log data; enable default EBS encryption going forward.",
    ),
    (
        "finding-9",
        "Lambda Function Over-Privileged",
        'Lambda function "data-processor" has full S3 access but only needs '
        "read access to specific buckets.",
        "MEDIUM",
        "aws:lambda:function:data-processor",
        "Scope the execution role to read-only access on the required buckets.",
    ),
    (
        "finding-10",
        "API Gateway Without Rate Limiting",
        "No rate limiting is configured on the API Gateway endpoint, leaving it "
        "open to abuse and denial-of-service attacks.",
        "HIGH",
        "aws:apigateway:rest-api/user-api",
        "Apply throttling limits and usage plans to the stage.",
    ),
    (
        "finding-11",
        "EC2 Instance Metadata v1 In Use",
        "EC2 instances still accept the legacy metadata service v1, which is "
        "exposed to SSRF attacks.",
        "LOW",
        "aws:ec2:instance/i-0123456789abcdef0",
        "Require IMDSv2 tokens on all instances.",
    ),
    (
        "finding-12",
        "KMS Key Rotation Disabled",
        "Automatic rotation is not enabled for KMS keys; long-lived keys "
        "increase exposure if compromised.",
        "LOW",
        "aws:kms:key/12345678-1234-1234-1234-123456789012",
        "Enable yearly automatic rotation.",
    ),
]


def sample_records(base: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Raw records for the sample dataset, dated relative to *base*."""
    base = base or datetime.now(timezone.utc)
    records: List[Dict[str, Any]] = []
    for days_ago, (fid, title, desc, severity, resource, analysis) in enumerate(
        _SAMPLE_ROWS, start=1
    ):
        records.append({
            "id": fid,
            "title": title,
            "description": desc,
            "severity": severity,
            "resource": resource,
            "llm_output": {"raw": analysis},
            "created_at": (base - timedelta(days=days_ago)).isoformat(),
        })
    return records


def sample_store(base: Optional[datetime] = None) -> FindingStore:
    """A FindingStore holding the sample dataset."""
    base = base or datetime.now(timezone.utc)
    return FindingStore.from_records(sample_records(base), fetched_at=base, is_sample=True)
