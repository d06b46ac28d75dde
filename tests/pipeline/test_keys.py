"""Tests for key descriptor staging, signing and pruning.

Covers:
- stage_key_descriptors() / purge_stray_key_descriptors()
- resolve_signing_jobs(): archives without a descriptor ship unsigned
- sign_archives(): used public key set, sequential and pooled
- pruning of private keys, unused public keys and staged descriptors
"""

import pytest

from conftest import SIGN_TOOL, write_file, write_json
from modpacker.core.errors import ManifestError, SigningError
from modpacker.core.layout import ModTree
from modpacker.pipeline.keys import (
    purge_stray_key_descriptors,
    resolve_signing_jobs,
    sign_archives,
    stage_key_descriptors,
)
from modpacker.pipeline.prune import (
    delete_files_named,
    delete_private_keys,
    delete_staged_key_descriptors,
    delete_unused_public_keys,
    prune_empty_directories,
)
from modpacker.pipeline.types import SigningJob


@pytest.fixture
def tree(tmp_path):
    return ModTree(tmp_path / "mod")


def _names(directory):
    return sorted(p.name for p in directory.iterdir())


# =============================================================================
# Staging
# =============================================================================


class TestStaging:
    def test_stages_descriptor_per_unit(self, tree):
        unit = tree.addons / "weapons"
        write_json(unit / "key.json", {"authority_name": "dev"})
        other = tree.root / "optional" / "extras"
        write_file(other / "pbo.json", "{}")

        staged = stage_key_descriptors([unit, other], tree)

        assert staged == [tree.addons / "weapons_key.json"]
        assert (tree.addons / "weapons_key.json").read_text() == (unit / "key.json").read_text()

    def test_purge_keeps_only_addons_top_level(self, tree):
        write_json(tree.addons / "weapons" / "key.json", {"authority_name": "dev"})
        write_json(tree.root / "optional" / "key.json", {"authority_name": "dev"})
        write_json(tree.addons / "key.json", {"authority_name": "dev"})
        write_json(tree.addons / "weapons_key.json", {"authority_name": "dev"})

        purged = purge_stray_key_descriptors(tree)

        assert sorted(purged) == sorted(
            [tree.addons / "weapons" / "key.json", tree.root / "optional" / "key.json"]
        )
        assert _names(tree.addons) == ["key.json", "weapons", "weapons_key.json"]


# =============================================================================
# Signing
# =============================================================================


class TestResolveSigningJobs:
    def test_pairs_archives_with_authorities(self, tree):
        write_file(tree.addons / "a.pbo")
        write_file(tree.addons / "b.pbo")
        write_json(tree.addons / "a_key.json", {"authority_name": "dev"})

        jobs = resolve_signing_jobs(tree)

        assert jobs == [SigningJob(archive_path=tree.addons / "a.pbo", authority_name="dev")]

    def test_malformed_descriptor(self, tree):
        write_file(tree.addons / "a.pbo")
        write_json(tree.addons / "a_key.json", {"authority": "dev"})

        with pytest.raises(ManifestError):
            resolve_signing_jobs(tree)

    def test_no_addons_folder(self, tree):
        assert resolve_signing_jobs(tree) == []


class TestSignArchives:
    @pytest.fixture
    def signed_tree(self, tree):
        for name in ("a", "b", "c"):
            write_file(tree.addons / f"{name}.pbo")
        write_file(tree.keys / "dev.biprivatekey")
        write_file(tree.keys / "ops.biprivatekey")
        return tree

    @pytest.mark.parametrize("max_workers", [1, 3])
    def test_returns_used_public_keys(self, signed_tree, toolchain, fake_tools, max_workers):
        jobs = [
            SigningJob(signed_tree.addons / "a.pbo", "dev"),
            SigningJob(signed_tree.addons / "b.pbo", "ops"),
            SigningJob(signed_tree.addons / "c.pbo", "dev"),
        ]

        used = sign_archives(jobs, toolchain.signer, signed_tree, max_workers=max_workers)

        assert used == {"dev.bikey", "ops.bikey"}
        assert len(fake_tools.commands_for(SIGN_TOOL)) == 3
        assert (signed_tree.addons / "b.pbo.ops.bisign").exists()

    def test_missing_private_key_fails(self, signed_tree, toolchain, fake_tools):
        jobs = [SigningJob(signed_tree.addons / "a.pbo", "nobody")]

        with pytest.raises(SigningError):
            sign_archives(jobs, toolchain.signer, signed_tree)


# =============================================================================
# Pruning
# =============================================================================


class TestPrune:
    def test_private_keys_always_deleted(self, tree):
        write_file(tree.keys / "dev.biprivatekey")
        write_file(tree.keys / "dev.bikey")

        delete_private_keys(tree.keys)

        assert _names(tree.keys) == ["dev.bikey"]

    def test_unused_public_keys_deleted(self, tree):
        write_file(tree.keys / "dev.bikey")
        write_file(tree.keys / "old.bikey")

        deleted = delete_unused_public_keys(tree.keys, {"dev.bikey"})

        assert deleted == [tree.keys / "old.bikey"]
        assert _names(tree.keys) == ["dev.bikey"]

    def test_staged_descriptors_deleted(self, tree):
        write_file(tree.addons / "a.pbo")
        write_file(tree.addons / "a_key.json")
        write_file(tree.addons / "key.json")
        write_file(tree.addons / "sub" / "key.json")

        delete_staged_key_descriptors(tree.addons, [tree.addons / "a_key.json"])

        assert _names(tree.addons) == ["a.pbo", "sub"]

    def test_other_addon_files_ending_in_key_json_kept(self, tree):
        write_file(tree.addons / "a_key.json")
        write_file(tree.addons / "monkey.json")
        write_file(tree.addons / "hotkey.json")
        write_file(tree.addons / "extra_key.json")

        deleted = delete_staged_key_descriptors(tree.addons, [tree.addons / "a_key.json"])

        assert deleted == [tree.addons / "a_key.json"]
        assert _names(tree.addons) == ["extra_key.json", "hotkey.json", "monkey.json"]

    def test_delete_files_named(self, tree):
        write_file(tree.root / ".modignore")
        write_file(tree.root / "a" / ".modignore")
        write_file(tree.root / "a" / "keep.txt")

        delete_files_named(tree.root, ".modignore")

        assert not (tree.root / ".modignore").exists()
        assert _names(tree.root / "a") == ["keep.txt"]

    def test_missing_folders_are_skipped(self, tree):
        assert delete_private_keys(tree.keys) == []
        assert delete_unused_public_keys(tree.keys, set()) == []
        assert delete_staged_key_descriptors(tree.addons) == []

    def test_prune_empty_directories(self, tree):
        write_file(tree.addons / "a.pbo")
        (tree.root / "x" / "y" / "z").mkdir(parents=True)
        tree.keys.mkdir()

        prune_empty_directories(tree.root)

        assert _names(tree.root) == ["addons"]

    def test_prune_keeps_empty_root(self, tree):
        tree.root.mkdir(parents=True)

        assert prune_empty_directories(tree.root) == []
        assert tree.root.is_dir()
