#!/usr/bin/env python3
"""
Configuration and Constants for the Compliance Helper Scripts

This module contains all configuration values, constants, and default settings
used throughout the scripts: cmdlet names, candidate field lists used to probe
loosely-typed service responses, default names and exit codes.

Author: Compliance Tools Team
Date: 2026-10-18
Version: 1.0
"""

# Application Information
APP_NAME = "Compliance Helper Scripts"
APP_VERSION = "1.0"
APP_DATE = "2026-10-18"

# PowerShell
POWERSHELL_CORE = "pwsh"
POWERSHELL_WINDOWS = "powershell.exe"
POWERSHELL_ARGS = ["-NoLogo", "-NoProfile", "-NonInteractive", "-Command", "-"]
COMPLIANCE_MODULE = "ExchangeOnlineManagement"

# Remote procedures
CMDLET_CONNECT = "Connect-IPPSSession"
CMDLET_DISCONNECT = "Disconnect-ExchangeOnline"
CMDLET_TEXT_EXTRACTION = "Test-TextExtraction"
CMDLET_DATA_CLASSIFICATION = "Test-DataClassification"
CMDLET_LIST_RULE_PACKAGES = "Get-DlpSensitiveInformationTypeRulePackage"
CMDLET_NEW_KEYWORD_DICTIONARY = "New-DlpKeywordDictionary"

# Depth limit when flattening remote objects for the wire
WIRE_MAX_DEPTH = 8

# Candidate field names, most preferred first
RULEPACK_IDENTITY_FIELDS = ("Identity", "RulePackageId", "Guid", "Id", "DistinguishedName")
RULEPACK_NAME_FIELDS = ("Name", "RulePackageName", "DisplayName", "LocalizedName", "Publisher")
RULEPACK_PAYLOAD_FIELDS = (
    "SerializedClassificationRuleCollection",
    "ClassificationRuleCollectionXml",
    "RulePackXml",
    "Xml",
    "FileData",
    "Content",
)

EXTRACTION_STREAM_FIELDS = ("ExtractedResults", "Streams", "Results")
STREAM_ID_FIELDS = ("Stream", "StreamName", "StreamId", "Name", "Id")
STREAM_TEXT_FIELDS = ("ExtractedStreamText", "ExtractedText", "Text", "Content")
STREAM_PRIMARY_FLAGS = ("IsBody", "IsPrimary", "IsMainStream")

EXTRACTION_ERROR_FIELDS = ("ErrorMessage", "Error", "Exception")
EXTRACTION_STATUS_FIELDS = ("Status", "ExtractionStatus", "State")
EXTRACTION_FAILURE_STATUSES = {"failed", "failure", "error"}

DICTIONARY_IDENTITY_FIELDS = ("Identity", "Guid", "Id")
DICTIONARY_NAME_FIELDS = ("Name", "DisplayName")

# Stream naming
STREAM_BODY = "Body"
STREAM_ATTACHMENT = "Attachment"

# Report
REPORT_STATUS_SUCCEEDED = "Succeeded"
REPORT_STATUS_FAILED = "Failed"
REPORT_JSON_INDENT = 2

# File Operations
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_EXPORT_NAME = "RulePackage"
UNNAMED_ITEM = "(unnamed)"
INVALID_FILENAME_CHARS = '<>:"/\\|?*'

# Security Limits
MAX_FILE_SIZE_MB = 100  # Maximum input file size sent to the service
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

# Keyword dictionaries
KEYWORD_SEPARATOR = "\r\n"
KEYWORD_ENCODING = "utf-16-le"
DEFAULT_DICTIONARY_DESCRIPTION = "Keyword dictionary created by compliance helper scripts"

# Selection suggestions
SUGGESTION_LIMIT = 3
SUGGESTION_SCORE_CUTOFF = 70

# Configuration files (in order of priority)
CONFIG_LOCATIONS = [
    './compliance_helpers.json',
    '~/.compliance-helpers/config.json',
]
ENV_USER = "COMPLIANCE_UPN"
ENV_POWERSHELL = "COMPLIANCE_PWSH"
ENV_OUTPUT_DIR = "COMPLIANCE_OUTPUT_DIR"
ENV_LOG_LEVEL = "COMPLIANCE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2

# Result Display Configuration
RESULTS_SEPARATOR = "=" * 80
RESULTS_SUBSEPARATOR = "-" * 80
