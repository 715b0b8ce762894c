import pytest

from phylopdf.parsers import parse_newick


@pytest.fixture
def small_tree():
    tree = parse_newick("((A:1,B:2):3,C:4);")
    tree.analyse()
    return tree


@pytest.fixture
def dated_tree():
    """Five leaves over five months with continents, clades and residues."""
    tree = parse_newick(
        "((A-2019-01-15:1,B-2019-02-10:2):1,(C-2019-03-03:1,(D-2019-04-20:1,E-2019-05-20:0.5):1):2);"
    )
    continents = {"A": "EUROPE", "B": "ASIA", "C": "EUROPE", "D": "AFRICA", "E": ""}
    clades = {"A": {"3C"}, "B": {"3C"}, "C": {"3C", "3C.2a"}, "D": {"3C.2a"}, "E": {"3C.2a"}}
    residues = {"A": "N", "B": "N", "C": "K", "D": "N", "E": ""}
    for leaf in tree.leaves():
        leaf.continent = continents[leaf.name]
        leaf.clades = set(clades[leaf.name])
        if residues[leaf.name]:
            leaf.aa_at = {"159": residues[leaf.name]}
    tree.analyse()
    return tree
