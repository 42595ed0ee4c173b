"""
Prover / Verifier protocol tests

1. Completeness: an honest prover is always accepted
2. Soundness: a prover without a cycle passes each round with probability 1/2
3. Zero-knowledge observables: pi never leaves the prover on branch 1
4. Verifier decisions for every rejection reason, and structural errors
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given, settings, strategies as st
from networkx.algorithms import isomorphism

from commitment import Commitment, commit, commit_to_graph, serialize_edges
from conftest import hamiltonian_graphs
from enroll import generate_graph_with_planted_cycle
from errors import InvalidWitness, ProtocolStructureError, VerificationFailure
from fake_prover import FakeProver, fan_edges, petersen, ring_graph
from graph_model import Graph
from hamiltonian_cycle import is_valid_hamiltonian_cycle
from permutation import apply_to_graph, generate_random_permutation, is_permutation
from prover import Prover
from verifier import Verifier, cycle_shape_problem
from zkp_session import run_batch, run_interactive
from zkp_types import Proof, ProofRound, RevealCycle, RevealPermutation


def identity_round(graph, response_factory):
    """Round whose committed graph is G itself (identity permutation)."""
    c = commit_to_graph(graph)
    return ProofRound(c, response_factory(tuple(graph.edges())))


# =============================================================================
# PROVER
# =============================================================================

class TestProver:

    def test_rejects_invalid_witness(self, five_cycle):
        with pytest.raises(InvalidWitness):
            Prover(five_cycle, [0, 1, 2, 4, 3])
        with pytest.raises(InvalidWitness):
            Prover(petersen(), list(range(10)))

    @pytest.mark.parametrize("k,challenges", [(3, [0, 1]), (2, [0, 1, 1]), (0, []), (-1, []), (2, [0, 2]), (1, [True])])
    def test_generate_proof_structure_errors(self, five_cycle, k, challenges):
        prover = Prover(five_cycle, [0, 1, 2, 3, 4])
        with pytest.raises(ProtocolStructureError):
            prover.generate_proof(k, challenges)

    def test_round_state_machine(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).start_round()
        assert not rnd.answered
        assert len(rnd.digest) == 32
        answer = rnd.respond(1)
        assert rnd.answered
        assert answer.commitment.digest == rnd.digest
        with pytest.raises(ProtocolStructureError):
            rnd.respond(0)

    def test_secrets_dropped_after_response(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).start_round()
        rnd.respond(0)
        assert rnd._perm is None and rnd._permuted is None and rnd._cycle is None

    def test_challenge_must_be_a_bit(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).start_round()
        for bad in (2, -1, "1", None, True):
            with pytest.raises(ProtocolStructureError):
                rnd.respond(bad)

    def test_branch_zero_reveals_permutation_and_graph(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).prove_round(0)
        resp = rnd.response
        assert isinstance(resp, RevealPermutation)
        assert is_permutation(list(resp.permutation), 5)
        assert house.is_isomorphic_under(resp.permutation, Graph(5, resp.permuted_edges))

    def test_branch_one_never_reveals_permutation(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).prove_round(1)
        resp = rnd.response
        assert isinstance(resp, RevealCycle)
        assert not hasattr(resp, "permutation")
        assert len(resp.cycle_edges) == 5
        assert all(u < v for u, v in resp.cycle_edges)
        permuted = Graph(5, resp.permuted_edges)
        assert all(permuted.has_edge(u, v) for u, v in resp.cycle_edges)

    def test_fresh_permutation_and_nonce_each_round(self):
        graph, cycle = generate_graph_with_planted_cycle(12, 3.0)
        proof = Prover(graph, cycle).generate_proof(40, [0] * 40)
        perms = {r.response.permutation for r in proof.rounds}
        nonces = {r.commitment.nonce for r in proof.rounds}
        digests = {r.commitment.digest for r in proof.rounds}
        assert len(perms) == len(nonces) == len(digests) == 40

    def test_proof_records_challenges(self, five_cycle):
        proof = Prover(five_cycle, [0, 1, 2, 3, 4]).generate_proof(4, [1, 0, 0, 1])
        assert proof.k == 4
        assert proof.challenges() == [1, 0, 0, 1]


# =============================================================================
# COMPLETENESS
# =============================================================================

class TestCompleteness:

    def test_scenario_a_five_cycle_twenty_rounds(self, five_cycle):
        verifier = Verifier()
        challenges = verifier.generate_challenges(20)
        proof = Prover(five_cycle, [0, 1, 2, 3, 4]).generate_proof(20, challenges)
        verdict = verifier.verify_proof(proof, five_cycle, expected_challenges=challenges)
        assert verdict.accepted
        assert verdict.failed_round_index is None and verdict.reason is None
        assert verdict.to_dict() == {"accepted": True, "detail": "ok"}

    @settings(max_examples=40, deadline=None)
    @given(hamiltonian_graphs(), st.lists(st.integers(0, 1), min_size=1, max_size=12))
    def test_honest_prover_always_accepted(self, gc, challenges):
        graph, cycle = gc
        proof = Prover(graph, cycle).generate_proof(len(challenges), challenges)
        assert Verifier().verify_proof(proof, graph, expected_challenges=challenges).accepted

    def test_interactive_session(self, house, drbg):
        rng = drbg()
        verdict = run_interactive(Prover(house, [0, 1, 2, 3, 4], rng), Verifier(rng), house, 32, verbose=False)
        assert verdict.accepted

    def test_batch_session(self, capsys):
        graph, cycle = generate_graph_with_planted_cycle(30, 4.0)
        proof, verdict = run_batch(Prover(graph, cycle), Verifier(), graph, 16)
        assert verdict.accepted
        assert len(proof.rounds) == 16
        assert "[prover] built proof with 16 rounds" in capsys.readouterr().out

    def test_rounds_verify_in_parallel(self):
        graph, cycle = generate_graph_with_planted_cycle(25, 4.0)
        proof = Prover(graph, cycle).generate_proof(24, [i % 2 for i in range(24)])
        verifier = Verifier()
        with ThreadPoolExecutor(max_workers=4) as pool:
            verdicts = list(pool.map(lambda r: verifier.verify_round(r, graph), proof.rounds))
        assert all(verdicts)

    def test_round_order_is_irrelevant(self, five_cycle):
        proof = Prover(five_cycle, [0, 1, 2, 3, 4]).generate_proof(6, [0, 1, 1, 0, 1, 0])
        reordered = Proof(6, tuple(reversed(proof.rounds)))
        assert Verifier().verify_proof(reordered, five_cycle).accepted


# =============================================================================
# SOUNDNESS
# =============================================================================

class TestSoundness:

    def test_guessing_prover_single_round_is_coin_flip(self, drbg):
        graph = petersen()
        rng = drbg(b"soundness-1")
        accepted = sum(
            run_interactive(FakeProver(graph, "guess", rng), Verifier(rng), graph, 1, verbose=False).accepted
            for _ in range(400)
        )
        assert 140 < accepted < 260

    def test_guessing_prover_is_rejected_over_many_rounds(self, drbg):
        # acceptance 2^-10 per session: expect ~0.2 of 200 sessions
        graph = petersen()
        rng = drbg(b"soundness-10")
        accepted = sum(
            run_interactive(FakeProver(graph, "guess", rng), Verifier(rng), graph, 10, verbose=False).accepted
            for _ in range(200)
        )
        assert accepted <= 5

    def test_guessing_prover_fails_the_branch_it_did_not_prepare(self, drbg):
        graph = petersen()
        rng = drbg(b"branches")
        verifier = Verifier(rng)
        reasons = set()
        for _ in range(60):
            rnd = FakeProver(graph, "guess", rng).start_round()
            c = verifier.generate_challenge()
            verdict = verifier.verify_round(rnd.respond(c), graph, expected_challenge=c)
            if not verdict:
                reasons.add(verdict.reason)
        assert reasons == {VerificationFailure.ISOMORPHISM_MISMATCH, VerificationFailure.INVALID_CYCLE_SHAPE}

    def test_scenario_c_arbitrary_edges_on_branch_one(self):
        graph = petersen()
        verifier = Verifier()
        for c in (0, 1):
            rnd = FakeProver(graph, "bad_cycle").start_round().respond(c)
            assert isinstance(rnd.response, RevealCycle)
            verdict = verifier.verify_round(rnd, graph)
            assert verdict.reason in (VerificationFailure.INVALID_CYCLE_SHAPE,
                                      VerificationFailure.EDGE_NOT_IN_COMMITTED_GRAPH)

    @pytest.mark.parametrize("n", range(4, 12))
    def test_fan_edges_are_never_a_cycle(self, n):
        assert cycle_shape_problem(fan_edges(n), n) is not None

    def test_fake_prover_needs_four_vertices(self):
        triangle = Graph(3, [(0, 1), (1, 2), (2, 0)])
        with pytest.raises(ValueError):
            fan_edges(3)
        with pytest.raises(ValueError):
            FakeProver(triangle, "bad_cycle")

    def test_answering_the_wrong_branch_is_caught(self):
        graph = petersen()
        rnd = FakeProver(graph, "bad_cycle").start_round().respond(0)
        verdict = Verifier().verify_round(rnd, graph, expected_challenge=0)
        assert verdict.reason is VerificationFailure.CHALLENGE_MISMATCH

    @pytest.mark.parametrize("mode", ["tamper_graph", "bad_nonce"])
    def test_scenario_d_tampered_commitment(self, mode, house):
        for c in (0, 1):
            rnd = FakeProver(house, mode).start_round().respond(c)
            verdict = Verifier().verify_round(rnd, house, expected_challenge=c)
            assert verdict.reason is VerificationFailure.COMMITMENT_MISMATCH

    def test_random_mode_never_accepted_over_many_rounds(self, drbg):
        graph = petersen()
        rng = drbg(b"random-mode")
        verdict = run_interactive(FakeProver(graph, "random", rng), Verifier(rng), graph, 40, verbose=False)
        assert not verdict.accepted

    def test_commitment_swapped_after_challenge(self, house):
        honest = Prover(house, [0, 1, 2, 3, 4])

        class Swapper:
            graph = house

            def start_round(self):
                rnd = honest.start_round()
                other = honest.start_round()

                class R:
                    digest = rnd.digest

                    def respond(self, c):
                        return other.respond(c)
                return R()

        verdict = run_interactive(Swapper(), Verifier(), house, 3, verbose=False)
        assert verdict.reason is VerificationFailure.COMMITMENT_MISMATCH
        assert verdict.failed_round_index == 0


# =============================================================================
# ZERO-KNOWLEDGE OBSERVABLES
# =============================================================================

class TestZeroKnowledge:

    def test_branch_one_is_simulatable_without_the_cycle(self):
        # the simulator knows no cycle of G: it commits to a relabeled n-ring
        graph = petersen()
        n = graph.vertex_count()
        for _ in range(10):
            sim = apply_to_graph(ring_graph(n), generate_random_permutation(n))
            edges = tuple(sim.edges())
            rnd = ProofRound(commit_to_graph(sim), RevealCycle(edges, edges))
            assert Verifier().verify_round(rnd, graph, expected_challenge=1).accepted

    def test_branch_zero_is_simulatable_without_the_cycle(self):
        graph = petersen()
        perm = generate_random_permutation(10)
        permuted = apply_to_graph(graph, perm)
        rnd = ProofRound(commit_to_graph(permuted), RevealPermutation(tuple(perm), tuple(permuted.edges())))
        assert Verifier().verify_round(rnd, graph, expected_challenge=0).accepted

    def test_branch_one_edge_list_leaks_a_cycle_through_isomorphism(self, house):
        # residual leakage of revealing G' on branch 1: anyone who can solve graph
        # isomorphism between G and G' maps the revealed cycle back onto G
        rnd = Prover(house, [0, 1, 2, 3, 4]).prove_round(1)
        permuted = Graph(5, rnd.response.permuted_edges)
        gm = isomorphism.GraphMatcher(house.to_networkx(), permuted.to_networkx())
        assert gm.is_isomorphic()
        back = {v: k for k, v in gm.mapping.items()}

        adj = {v: [] for v in range(5)}
        for u, v in rnd.response.cycle_edges:
            adj[u].append(v)
            adj[v].append(u)
        order, prev = [0], None
        while len(order) < 5:
            nxt = [w for w in adj[order[-1]] if w != prev][0]
            prev = order[-1]
            order.append(nxt)
        assert is_valid_hamiltonian_cycle([back[v] for v in order], house)


# =============================================================================
# VERIFIER DECISIONS
# =============================================================================

class TestVerifyRound:

    def test_commitment_mismatch(self, house, five_cycle):
        rnd = ProofRound(commit_to_graph(five_cycle), RevealPermutation(tuple(range(5)), tuple(house.edges())))
        verdict = Verifier().verify_round(rnd, house)
        assert verdict.reason is VerificationFailure.COMMITMENT_MISMATCH
        assert verdict.failed_round_index is None

    def test_invalid_permutation(self, house):
        rnd = identity_round(house, lambda e: RevealPermutation((0, 0, 1, 2, 3), e))
        assert Verifier().verify_round(rnd, house).reason is VerificationFailure.INVALID_PERMUTATION

    def test_permutation_wrong_length(self, house):
        rnd = identity_round(house, lambda e: RevealPermutation((0, 1, 2, 3), e))
        assert Verifier().verify_round(rnd, house).reason is VerificationFailure.INVALID_PERMUTATION

    def test_isomorphism_mismatch(self):
        g = Graph(4, [(0, 1), (1, 2), (2, 3), (3, 0), (0, 2)])
        rnd = identity_round(g, lambda e: RevealPermutation((1, 0, 2, 3), e))
        assert Verifier().verify_round(rnd, g).reason is VerificationFailure.ISOMORPHISM_MISMATCH

    def test_identity_round_accepted(self, house):
        rnd = identity_round(house, lambda e: RevealPermutation((0, 1, 2, 3, 4), e))
        assert Verifier().verify_round(rnd, house).accepted

    def test_edge_not_in_committed_graph(self, house):
        # 0-2-1-3-4-0 is a well-formed 5-cycle but (0, 2) and (1, 3) are not edges of the house
        cyc = ((0, 2), (1, 2), (1, 3), (3, 4), (0, 4))
        rnd = identity_round(house, lambda e: RevealCycle(e, cyc))
        assert Verifier().verify_round(rnd, house).reason is VerificationFailure.EDGE_NOT_IN_COMMITTED_GRAPH

    def test_valid_cycle_in_committed_graph(self, house):
        cyc = ((0, 1), (1, 2), (2, 3), (3, 4), (0, 4))
        rnd = identity_round(house, lambda e: RevealCycle(e, cyc))
        assert Verifier().verify_round(rnd, house).accepted

    @pytest.mark.parametrize("cyc", [
        ((0, 1), (1, 2), (2, 3), (3, 4)),                   # too few
        ((0, 1), (1, 2), (2, 3), (3, 4), (4, 0), (1, 4)),   # too many
        ((0, 1), (1, 0), (2, 3), (3, 4), (4, 2)),           # duplicate edge
        ((0, 1), (1, 2), (2, 3), (3, 4), (4, 4)),           # self-loop
        ((0, 1), (1, 2), (2, 3), (3, 4), (4, 7)),           # out of range
        ((0, 1), (0, 2), (0, 3), (0, 4), (1, 2)),           # fan
    ])
    def test_invalid_cycle_shape(self, house, cyc):
        rnd = identity_round(house, lambda e: RevealCycle(e, cyc))
        assert Verifier().verify_round(rnd, house).reason is VerificationFailure.INVALID_CYCLE_SHAPE

    def test_two_triangles_are_not_one_cycle(self):
        assert cycle_shape_problem([(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3)], 6) is not None
        assert cycle_shape_problem([(0, 1), (1, 2), (2, 3), (3, 4), (4, 5), (5, 0)], 6) is None

    def test_challenge_mismatch(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).prove_round(1)
        verdict = Verifier().verify_round(rnd, house, expected_challenge=0)
        assert verdict.reason is VerificationFailure.CHALLENGE_MISMATCH

    @pytest.mark.parametrize("bad", [
        "junk",
        ProofRound("digest", RevealCycle((), ())),
        ProofRound(Commitment(b"d", b"n"), ("not", "a", "response")),
        ProofRound(Commitment(b"d", b"n"), RevealCycle(((0, "1"),), ())),
        ProofRound(Commitment(b"d", b"n"), RevealCycle(((0, 1, 2),), ())),
        ProofRound(Commitment(b"d", b"n"), RevealPermutation(None, ())),
    ])
    def test_malformed_round_raises(self, house, bad):
        with pytest.raises(ProtocolStructureError):
            Verifier().verify_round(bad, house)

    def test_committed_malformed_graph_raises(self, house):
        edges = ((0, 9),)
        rnd = ProofRound(commit(serialize_edges(edges)), RevealPermutation(tuple(range(5)), edges))
        with pytest.raises(ProtocolStructureError):
            Verifier().verify_round(rnd, house)

    def test_bad_expected_challenge_raises(self, house):
        rnd = Prover(house, [0, 1, 2, 3, 4]).prove_round(1)
        with pytest.raises(ProtocolStructureError):
            Verifier().verify_round(rnd, house, expected_challenge=3)


class TestVerifyProof:

    def test_round_count_mismatch(self, five_cycle):
        proof = Prover(five_cycle, [0, 1, 2, 3, 4]).generate_proof(2, [0, 1])
        verdict = Verifier().verify_proof(Proof(3, proof.rounds), five_cycle)
        assert not verdict.accepted
        assert verdict.reason is VerificationFailure.ROUND_COUNT_MISMATCH
        assert verdict.failed_round_index is None

    def test_fail_fast_reports_first_failing_round(self, house, five_cycle):
        good = Prover(house, [0, 1, 2, 3, 4]).generate_proof(4, [0, 1, 0, 1]).rounds
        bad_commit = ProofRound(commit_to_graph(five_cycle), good[2].response)
        bad_perm = identity_round(house, lambda e: RevealPermutation((0, 0, 0, 0, 0), e))
        proof = Proof(5, (good[0], good[1], bad_commit, bad_perm, good[3]))
        verdict = Verifier().verify_proof(proof, house)
        assert verdict.failed_round_index == 2
        assert verdict.reason is VerificationFailure.COMMITMENT_MISMATCH
        assert verdict.to_dict()["reason"] == "CommitmentMismatch"
        assert verdict.to_dict()["failedRoundIndex"] == 2
        assert "round 2" in str(verdict)

    def test_expected_challenges_length(self, five_cycle):
        proof = Prover(five_cycle, [0, 1, 2, 3, 4]).generate_proof(2, [0, 1])
        with pytest.raises(ProtocolStructureError):
            Verifier().verify_proof(proof, five_cycle, expected_challenges=[0])

    def test_not_a_proof(self, five_cycle):
        with pytest.raises(ProtocolStructureError):
            Verifier().verify_proof({"k": 1, "rounds": []}, five_cycle)

    def test_challenge_is_a_bit(self):
        verifier = Verifier()
        bits = verifier.generate_challenges(200)
        assert set(bits) == {0, 1}
