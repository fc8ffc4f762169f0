"""
Integration Tests for the Helper Scripts

Runs each script's command-line entry point with the compliance session
replaced by a mock, checking the printed/written output, exit codes and
that the session is always closed.
"""

import io
import json
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

import keyword_dictionary
import rulepack_export
import text_extraction
from src.core.errors import RemoteServiceError


def mock_session_class(session):
    """A stand-in for ComplianceSession whose context yields session"""
    session_class = MagicMock()
    session_class.return_value.__enter__.return_value = session
    session_class.return_value.__exit__.return_value = False
    return session_class


def run_cli(cli, argv):
    stdout, stderr = io.StringIO(), io.StringIO()
    with redirect_stdout(stdout), redirect_stderr(stderr):
        code = cli(argv)
    return code, stdout.getvalue(), stderr.getvalue()


class ScriptTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {
            "COMPLIANCE_UPN": "",
            "COMPLIANCE_PWSH": "",
            "COMPLIANCE_OUTPUT_DIR": "",
            "COMPLIANCE_LOG_LEVEL": "",
        })
        self.env.start()
        self.cwd = os.getcwd()
        os.chdir(self.temp_dir)

    def tearDown(self):
        os.chdir(self.cwd)
        self.env.stop()
        shutil.rmtree(self.temp_dir)


class TestTextExtractionScript(ScriptTestCase):
    """Test text_extraction.py"""

    def setUp(self):
        super().setUp()
        self.document = Path(self.temp_dir) / "invoice.pdf"
        self.document.write_bytes(b"%PDF-1.7 test")
        self.session = MagicMock()
        self.session.extract_text.return_value = {"ExtractedResults": [
            {"Stream": "stream0", "ExtractedStreamText": "Card 4111 1111 1111 1111"},
            {"Stream": "att0", "ExtractedStreamText": "   "},
        ]}
        self.session.classify_text.return_value = {"ClassificationResults": [{"Count": 1}]}

    def run_script(self, *argv):
        with patch.object(text_extraction, "ComplianceSession", mock_session_class(self.session)) as cls:
            result = run_cli(text_extraction.cli, list(argv))
        return result + (cls,)

    def test_report_printed(self):
        code, out, _err, cls = self.run_script(str(self.document), "-u", "admin@contoso.com")
        self.assertEqual(code, 0)
        report = json.loads(out)
        self.assertEqual(report["SourceFile"], str(self.document))
        self.assertEqual([s["Name"] for s in report["Streams"]], ["Body", "Attachment"])
        self.assertIsNone(report["DataClassification"])
        self.session.extract_text.assert_called_once_with(b"%PDF-1.7 test")
        self.session.classify_text.assert_not_called()
        cls.assert_called_once_with("admin@contoso.com", None)

    def test_classification_joined(self):
        output = Path(self.temp_dir) / "report.json"
        code, out, _err, _cls = self.run_script(
            str(self.document), "-u", "admin@contoso.com", "--classify", "--no-progress", "-o", str(output)
        )
        self.assertEqual(code, 0)
        self.assertIn("Report saved to", out)
        report = json.loads(output.read_text(encoding="utf-8"))
        streams = {s["Name"]: s for s in report["Streams"]}
        self.assertEqual(streams["Body"]["Classification"], {"ClassificationResults": [{"Count": 1}]})
        # No text extracted for the attachment, so no classification either
        self.assertIsNone(streams["Attachment"]["Classification"])
        self.session.classify_text.assert_called_once_with("Card 4111 1111 1111 1111")

    def test_unwritable_output_is_reported(self):
        """A report path that cannot be written gives an error line, not a traceback"""
        code, out, err, cls = self.run_script(str(self.document), "-u", "admin@contoso.com", "-o", self.temp_dir)
        self.assertEqual(code, 1)
        self.assertIn("Error: Could not write report to", err)
        self.assertNotIn("Report saved to", out)
        cls.return_value.__exit__.assert_called_once()

    def test_extraction_failure_still_reports(self):
        self.session.extract_text.return_value = {"ErrorMessage": "File type not supported"}
        code, out, err, _cls = self.run_script(str(self.document), "-u", "admin@contoso.com", "--classify")
        self.assertEqual(code, 1)
        report = json.loads(out)
        self.assertEqual(report["Status"], "Failed")
        self.assertEqual(report["Streams"], [])
        self.assertIn("File type not supported", err)
        self.session.classify_text.assert_not_called()

    def test_missing_file_aborts_before_remote_call(self):
        code, _out, err, cls = self.run_script(os.path.join(self.temp_dir, "missing.pdf"), "-u", "a@b.c")
        self.assertEqual(code, 2)
        self.assertIn("does not exist", err)
        cls.assert_not_called()

    def test_remote_error(self):
        self.session.extract_text.side_effect = RemoteServiceError("The session has expired")
        code, _out, err, cls = self.run_script(str(self.document), "-u", "admin@contoso.com")
        self.assertEqual(code, 1)
        self.assertIn("The session has expired", err)
        cls.return_value.__exit__.assert_called_once()


class TestRulepackExportScript(ScriptTestCase):
    """Test rulepack_export.py"""

    def setUp(self):
        super().setUp()
        self.session = MagicMock()
        self.session.list_rule_packages.return_value = [
            {"Identity": "Microsoft Rule Package", "Name": "Microsoft Rule Package",
             "SerializedClassificationRuleCollection": b"<RulePackage>ms</RulePackage>"},
            {"Identity": "c0ffee", "Name": "Contoso: HR",
             "ClassificationRuleCollectionXml": "<RulePackage>contoso</RulePackage>"},
            {"Identity": "d1", "Name": "Default", "Definition": "  <RulePackage>d1</RulePackage>"},
            {"Identity": "d2", "Name": "Default", "Description": "no payload"},
        ]

    def run_script(self, *argv):
        with patch.object(rulepack_export, "ComplianceSession", mock_session_class(self.session)) as cls:
            result = run_cli(rulepack_export.cli, list(argv))
        return result + (cls,)

    def test_list(self):
        code, out, _err, _cls = self.run_script("-u", "admin@contoso.com", "--list")
        self.assertEqual(code, 0)
        self.assertIn("RULE PACKAGES: 4", out)
        self.assertIn("[2] Contoso: HR", out)
        self.assertEqual(os.listdir(self.temp_dir), [])

    def test_export_by_index(self):
        code, out, _err, _cls = self.run_script("-u", "admin@contoso.com", "--select", "1",
                                                "--output-dir", self.temp_dir)
        self.assertEqual(code, 0)
        exported = Path(self.temp_dir) / "Microsoft Rule Package.xml"
        self.assertEqual(exported.read_bytes(), b"<RulePackage>ms</RulePackage>")
        self.assertIn("Exported 'Microsoft Rule Package'", out)

    def test_export_by_name_sanitizes_filename(self):
        code, _out, _err, _cls = self.run_script("-u", "admin@contoso.com", "--select", "Contoso: HR",
                                                 "-d", self.temp_dir)
        self.assertEqual(code, 0)
        exported = Path(self.temp_dir) / "Contoso_ HR.xml"
        self.assertEqual(exported.read_text(encoding="utf-8"), "<RulePackage>contoso</RulePackage>")

    def test_payload_scan_fallback(self):
        code, _out, _err, _cls = self.run_script("-u", "a@b.c", "--select", "3", "-d", self.temp_dir)
        self.assertEqual(code, 0)
        self.assertTrue((Path(self.temp_dir) / "Default.xml").exists())

    def test_ambiguous_name(self):
        code, _out, err, _cls = self.run_script("-u", "a@b.c", "--select", "Default", "-d", self.temp_dir)
        self.assertEqual(code, 1)
        self.assertIn("select by number", err)

    def test_out_of_range(self):
        code, _out, err, _cls = self.run_script("-u", "a@b.c", "--select", "9", "-d", self.temp_dir)
        self.assertEqual(code, 1)
        self.assertIn("out of range", err)

    def test_missing_payload(self):
        code, _out, err, _cls = self.run_script("-u", "a@b.c", "--select", "4", "-d", self.temp_dir)
        self.assertEqual(code, 1)
        self.assertIn("SerializedClassificationRuleCollection", err)

    def test_payload_lookup_uses_field_resolver(self):
        package = {"Name": "Custom", "Version": 3, "Rules": "<RulePackage>x</RulePackage>"}
        with patch.object(rulepack_export, "resolve_field", wraps=rulepack_export.resolve_field) as resolver:
            payload = rulepack_export.rule_package_payload(package)
        self.assertEqual(payload, "<RulePackage>x</RulePackage>")
        resolver.assert_called_once()
        self.assertTrue(resolver.call_args.kwargs["scan_payloads"])

    def test_missing_output_dir_aborts_before_remote_call(self):
        missing = os.path.join(self.temp_dir, "missing")
        code, _out, _err, cls = self.run_script("-u", "a@b.c", "--select", "1", "-d", missing)
        self.assertEqual(code, 2)
        cls.assert_not_called()


class TestKeywordDictionaryScript(ScriptTestCase):
    """Test keyword_dictionary.py"""

    def setUp(self):
        super().setUp()
        self.keywords = Path(self.temp_dir) / "codenames.txt"
        self.keywords.write_text("Falcon\nOsprey, Kestrel\nFalcon\n", encoding="utf-8")
        self.session = MagicMock()
        self.session.new_keyword_dictionary.return_value = {"Identity": "abc-123", "Name": "Codenames"}

    def test_create(self):
        with patch.object(keyword_dictionary, "ComplianceSession", mock_session_class(self.session)):
            code, out, _err = run_cli(keyword_dictionary.cli, [
                "Codenames", str(self.keywords), "-u", "admin@contoso.com", "--description", "Projects",
            ])
        self.assertEqual(code, 0)
        self.assertIn("Created keyword dictionary: Codenames", out)
        self.assertIn("Identity: abc-123", out)
        self.assertIn("Keywords: 3", out)
        self.session.new_keyword_dictionary.assert_called_once_with(
            "Codenames", "Projects", "Falcon\r\nOsprey\r\nKestrel".encode("utf-16-le")
        )

    def test_encode_keywords(self):
        self.assertEqual(keyword_dictionary.encode_keywords(["a", "b"]), b"a\x00\r\x00\n\x00b\x00")


if __name__ == '__main__':
    unittest.main()
